"""
Generation Orchestrator
=======================

Drives one video generation from submission to a playable resource:
submit the job, poll the long-running operation on a fixed interval,
then download the first generated video.

A continuation reuses the same path with the previous scene's
ContinuationSource attached, which fixes its aspect ratio.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Dict, Any

from ..api.base import (
    AspectRatio,
    BaseVeoClient,
    ContinuationSource,
    GenerationRequest,
    OperationHandle,
)
from ..core.exceptions import (
    ConfigurationError,
    GenerationCancelledError,
    GenerationFailedError,
    GenerationTimeoutError,
    InvalidContinuationError,
    MissingResultError,
)
from .credentials import CredentialProvider
from .resources import ResourceRegistry, VideoResource

logger = logging.getLogger(__name__)


DEFAULT_POLL_INTERVAL = 10.0


# =============================================================================
# Data Classes
# =============================================================================


class CancellationToken:
    """Cooperative cancellation for a polling loop."""

    def __init__(self):
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self, seconds: float) -> bool:
        """Sleep up to `seconds`; return True if cancelled meanwhile."""
        if self.cancelled:
            return True
        if seconds <= 0:
            await asyncio.sleep(0)
            return self.cancelled
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True


@dataclass
class PollState:
    """State of one polling loop; never outlives await_completion."""

    handle: OperationHandle
    checks: int = 0

    @property
    def done(self) -> bool:
        return self.handle.done

    @property
    def error(self) -> Optional[Dict[str, Any]]:
        return self.handle.error

    @property
    def response(self) -> Optional[Dict[str, Any]]:
        return self.handle.response


@dataclass(frozen=True)
class GenerationResult:
    """A finished scene. Only ever built from a successful operation."""

    video: VideoResource
    source_operation: OperationHandle
    resolved_aspect_ratio: AspectRatio
    continuation_source: ContinuationSource
    request: GenerationRequest
    completed_at: datetime = field(default_factory=datetime.now)

    def release(self) -> None:
        """Release the video resource."""
        self.video.release()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "video": self.video.resource_id,
            "mime_type": self.video.mime_type,
            "size": self.video.size,
            "operation_name": self.source_operation.name,
            "resolved_aspect_ratio": self.resolved_aspect_ratio.value,
            "continuation_source": self.continuation_source.to_dict(),
            "prompt": self.request.prompt,
            "model": self.request.model.value,
            "resolution": self.request.resolution.value,
            "completed_at": self.completed_at.isoformat(),
        }


# =============================================================================
# Orchestrator
# =============================================================================


class GenerationOrchestrator:
    """
    Runs generation requests against a remote Veo client.

    No retries happen at any step: every failure is raised to the caller
    as a typed StudioError.
    """

    def __init__(
        self,
        client: BaseVeoClient,
        credentials: CredentialProvider,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_wait: Optional[float] = None,
        resources: Optional[ResourceRegistry] = None,
    ):
        """
        Args:
            client: Remote generation API
            credentials: Supplies the API key on every call
            poll_interval: Seconds between status checks
            max_wait: Polling deadline in seconds (None waits indefinitely)
            resources: Registry that owns fetched video bytes
        """
        self.client = client
        self.credentials = credentials
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self.resources = resources or ResourceRegistry()
        self._active_token: Optional[CancellationToken] = None

    def _require_credential(self) -> str:
        credential = self.credentials.get_credential()
        if not credential:
            raise ConfigurationError(
                "API key not available. Select a key or set GEMINI_API_KEY.",
                config_key="api_key",
            )
        return credential

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    async def submit(self, request: GenerationRequest) -> OperationHandle:
        """Validate the request and start the generation job."""
        request.validate()
        credential = self._require_credential()

        if request.is_continuation:
            source = request.continuation_source
            if request.aspect_ratio is not source.aspect_ratio:
                logger.info(
                    f"Ignoring requested aspect ratio {request.aspect_ratio.value}; "
                    f"continuation inherits {source.aspect_ratio.value}"
                )
            logger.info(f"Submitting continuation of {source.operation_name}")

        return await self.client.create_generation_job(request, credential)

    async def await_completion(
        self,
        handle: OperationHandle,
        cancel_token: Optional[CancellationToken] = None,
        max_wait: Optional[float] = None,
    ) -> OperationHandle:
        """
        Poll until the operation is done.

        Each iteration waits the poll interval, then checks status once.

        Raises:
            GenerationCancelledError: cancel_token fired during a wait
            GenerationTimeoutError: max_wait elapsed
            GenerationFailedError: the operation finished with an error
            UpstreamRequestError: a status check failed; it is not retried
        """
        token = cancel_token or CancellationToken()
        deadline = max_wait if max_wait is not None else self.max_wait
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        state = PollState(handle=handle)

        while not state.done:
            elapsed = loop.time() - start_time
            if deadline is not None and elapsed >= deadline:
                raise GenerationTimeoutError(
                    f"Operation {handle.name} timed out after {deadline} seconds",
                    operation_name=handle.name,
                    timeout_seconds=deadline,
                )

            wait = self.poll_interval
            if deadline is not None:
                wait = min(wait, deadline - elapsed)
            if await token.wait(wait):
                logger.info(f"Generation cancelled while polling {handle.name}")
                raise GenerationCancelledError(
                    "Generation was cancelled",
                    operation_name=handle.name,
                )

            credential = self._require_credential()
            state.handle = await self.client.get_job_status(state.handle, credential)
            state.checks += 1
            logger.debug(f"Operation {handle.name} check {state.checks}: done={state.done}")

        if state.error:
            error = state.error if isinstance(state.error, dict) else {}
            raise GenerationFailedError(
                error.get("message") or "Video generation failed in operation.",
                operation_name=state.handle.name,
                upstream_code=error.get("code"),
            )

        logger.info(f"Operation {state.handle.name} done after {state.checks} status checks")
        return state.handle

    async def materialize(
        self,
        operation: OperationHandle,
        request: GenerationRequest,
    ) -> GenerationResult:
        """Download the first generated video and wrap it as a result."""
        video = operation.first_video()
        uri = video.get("uri") if video else None
        if not uri:
            raise MissingResultError(
                "Could not retrieve video URI from the generation result.",
                operation_name=operation.name,
            )

        credential = self._require_credential()
        asset = await self.client.fetch_asset(uri, credential)
        resource = self.resources.create(asset.data, asset.mime_type)

        aspect_ratio = request.effective_aspect_ratio
        source = ContinuationSource(
            operation_name=operation.name,
            video_uri=uri,
            aspect_ratio=aspect_ratio,
            resolution=request.resolution,
            model=request.model,
            mime_type=video.get("mimeType"),
        )
        return GenerationResult(
            video=resource,
            source_operation=operation,
            resolved_aspect_ratio=aspect_ratio,
            continuation_source=source,
            request=request,
        )

    # -------------------------------------------------------------------------
    # Entry Points
    # -------------------------------------------------------------------------

    async def generate(
        self,
        request: GenerationRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> GenerationResult:
        """Submit, poll, and materialize one request."""
        token = cancel_token or CancellationToken()
        self._active_token = token
        try:
            handle = await self.submit(request)
            operation = await self.await_completion(handle, cancel_token=token)
            result = await self.materialize(operation, request)
        finally:
            if self._active_token is token:
                self._active_token = None

        logger.info(f"Generation complete: {result.video.resource_id}")
        return result

    async def run_scene(
        self,
        request: GenerationRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> GenerationResult:
        """Generate a standalone scene."""
        return await self.generate(request, cancel_token=cancel_token)

    async def run_continuation(
        self,
        request: GenerationRequest,
        prior_result: Optional[GenerationResult],
        cancel_token: Optional[CancellationToken] = None,
    ) -> GenerationResult:
        """Generate a scene that extends prior_result's video."""
        if prior_result is None or prior_result.continuation_source is None:
            raise InvalidContinuationError(
                "The previous scene must be generated before a continuation",
                field="prior_result",
            )
        request = replace(request, continuation_source=prior_result.continuation_source)
        return await self.generate(request, cancel_token=cancel_token)

    def cancel(self) -> bool:
        """Cancel the in-flight generation. Returns False if none is running."""
        if self._active_token is None:
            return False
        self._active_token.cancel()
        return True
