"""
Google Veo Client
=================

Veo video generation through the Gemini API's long-running
predictLongRunning operations.

Features:
- Text-to-video with model, resolution and aspect ratio
- Video extension from a previously generated clip
- Authenticated download of generated assets
"""

import logging
from typing import Optional, Dict, Any

import httpx

from .base import (
    BaseVeoClient,
    FetchedAsset,
    GenerationRequest,
    ModelVariant,
    OperationHandle,
)
from ..core.config import ModelsConfig
from ..core.exceptions import AssetFetchError, SecurityError, UpstreamRequestError
from ..core.security import redact_api_key, validate_url

logger = logging.getLogger(__name__)


class GoogleVeoClient(BaseVeoClient):
    """
    Gemini API client for Veo.

    The credential is passed on every call, never stored on the client.
    """

    def __init__(self, models: Optional[ModelsConfig] = None, **kwargs):
        super().__init__(**kwargs)
        self.models = models or ModelsConfig()

    @property
    def provider_name(self) -> str:
        return "Google Veo"

    def _get_default_base_url(self) -> str:
        return "https://generativelanguage.googleapis.com/v1beta"

    def model_id(self, variant: ModelVariant) -> str:
        """Resolve a variant to the configured model identifier."""
        if variant is ModelVariant.STANDARD:
            return self.models.standard
        return self.models.fast

    def _auth_headers(self, credential: str) -> Dict[str, str]:
        return {"x-goog-api-key": credential}

    def _build_payload(self, request: GenerationRequest) -> Dict[str, Any]:
        """Build the predictLongRunning request body."""
        instance: Dict[str, Any] = {"prompt": request.prompt}
        if request.continuation_source is not None:
            instance["video"] = request.continuation_source.video_reference()

        return {
            "instances": [instance],
            "parameters": {
                "aspectRatio": request.effective_aspect_ratio.value,
                "resolution": request.resolution.value,
                "sampleCount": 1,
            },
        }

    async def create_generation_job(
        self,
        request: GenerationRequest,
        credential: str,
    ) -> OperationHandle:
        """Submit the request and return the new operation."""
        model = self.model_id(request.model)
        endpoint = f"{self.base_url}/models/{model}:predictLongRunning"
        payload = self._build_payload(request)

        logger.info(f"Submitting video generation with {self.provider_name}: {model}")
        logger.debug(f"Payload: {payload}")

        client = await self._get_client()
        try:
            response = await client.post(
                endpoint,
                json=payload,
                headers=self._auth_headers(credential),
            )
        except httpx.HTTPError as e:
            raise UpstreamRequestError(
                f"Generation request failed: {redact_api_key(str(e), credential)}"
            ) from e

        if response.status_code != 200:
            raise self._upstream_error("Generation request", response, credential)

        data = self._json_object("Generation request", response, credential)
        if not data.get("name"):
            raise UpstreamRequestError(
                "No operation name in response",
                status_code=response.status_code,
                response_body=redact_api_key(response.text, credential),
            )

        handle = OperationHandle.from_payload(data)
        logger.info(f"Operation started: {handle.name}")
        return handle

    async def get_job_status(
        self,
        handle: OperationHandle,
        credential: str,
    ) -> OperationHandle:
        """Fetch the latest state of an operation."""
        endpoint = f"{self.base_url}/{handle.name}"

        client = await self._get_client()
        try:
            response = await client.get(endpoint, headers=self._auth_headers(credential))
        except httpx.HTTPError as e:
            raise UpstreamRequestError(
                f"Status check failed: {redact_api_key(str(e), credential)}"
            ) from e

        if response.status_code != 200:
            raise self._upstream_error("Status check", response, credential)

        data = self._json_object("Status check", response, credential)
        data.setdefault("name", handle.name)
        return OperationHandle.from_payload(data)

    async def fetch_asset(self, uri: str, credential: str) -> FetchedAsset:
        """Download a generated video, authenticating with the key query param."""
        try:
            validate_url(uri)
        except SecurityError as e:
            raise AssetFetchError(f"Failed to fetch video file: {e.message}") from e

        # Merge so the download URI keeps its own query (alt=media)
        url = httpx.URL(uri).copy_merge_params({"key": credential})

        client = await self._get_client()
        try:
            response = await client.get(url, follow_redirects=True)
        except httpx.HTTPError as e:
            raise AssetFetchError(
                f"Failed to fetch video file: {redact_api_key(str(e), credential)}"
            ) from e

        if not response.is_success:
            raise AssetFetchError(
                f"Failed to fetch video file: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        mime_type = response.headers.get("content-type", "video/mp4").split(";")[0].strip()
        logger.info(f"Fetched video asset ({len(response.content)} bytes)")
        return FetchedAsset(data=response.content, mime_type=mime_type or "video/mp4")

    def _upstream_error(
        self,
        action: str,
        response: httpx.Response,
        credential: str,
    ) -> UpstreamRequestError:
        """Translate a non-200 response, keeping the structured error status."""
        body = redact_api_key(response.text, credential)
        message = body
        upstream_status = None

        try:
            data = response.json()
        except ValueError:
            data = {}
        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict):
            message = error.get("message") or message
            upstream_status = error.get("status")

        logger.warning(f"{action} rejected: {response.status_code} {upstream_status or ''}".rstrip())
        return UpstreamRequestError(
            f"{action} failed: {response.status_code} - {redact_api_key(message, credential)}",
            status_code=response.status_code,
            upstream_status=upstream_status,
            response_body=body,
        )

    def _json_object(
        self,
        action: str,
        response: httpx.Response,
        credential: str,
    ) -> Dict[str, Any]:
        """Decode a 200 body that must be a JSON object."""
        try:
            data = response.json()
        except ValueError:
            data = None

        if not isinstance(data, dict):
            logger.warning(f"{action} returned a non-JSON-object body")
            raise UpstreamRequestError(
                f"{action} failed: unexpected response body",
                status_code=response.status_code,
                response_body=redact_api_key(response.text, credential),
            )
        return data
