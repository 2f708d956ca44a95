"""
Base Veo Client
===============

Data model for generation requests and long-running operations, and the
abstract client every remote generation backend implements.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any

import httpx

from ..core.exceptions import ValidationError, InvalidContinuationError
from ..core.security import sanitize_prompt

logger = logging.getLogger(__name__)


DEFAULT_TIMEOUT = 120


# =============================================================================
# Enumerations
# =============================================================================


class _ParsableEnum(Enum):
    """Enum that accepts its members, values, or names from user input."""

    @classmethod
    def parse(cls, value: Any) -> "_ParsableEnum":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip()
            for member in cls:
                if text == member.value or text.lower() == member.name.lower():
                    return member
            alias = cls._aliases().get(text.lower())
            if alias is not None:
                return alias
        raise ValidationError(
            f"Invalid {cls.__name__}: {value!r}",
            field=cls.__name__,
            value=value,
            constraint="one of " + ", ".join(m.value for m in cls),
        )

    @classmethod
    def _aliases(cls) -> Dict[str, "_ParsableEnum"]:
        return {}


class ModelVariant(_ParsableEnum):
    """Veo model variant. Only STANDARD can extend an existing video."""

    FAST = "fast"
    STANDARD = "standard"

    @classmethod
    def _aliases(cls):
        return {
            "veo-3.1-fast-generate-preview": cls.FAST,
            "veo-3.1-generate-preview": cls.STANDARD,
        }


class Resolution(_ParsableEnum):
    P720 = "720p"
    P1080 = "1080p"


class AspectRatio(_ParsableEnum):
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class ContinuationSource:
    """
    What a continuation needs from a finished generation.

    Extracted once when the prior result is materialized so later requests
    never depend on the shape of the raw operation payload.
    """

    operation_name: str
    video_uri: str
    aspect_ratio: AspectRatio
    resolution: Resolution
    model: ModelVariant
    mime_type: Optional[str] = None

    def validate(self) -> None:
        if not self.video_uri:
            raise InvalidContinuationError(
                "Could not find video data from the previous scene",
                field="continuation_source.video_uri",
            )
        if not isinstance(self.aspect_ratio, AspectRatio):
            raise InvalidContinuationError(
                "Previous scene has no resolved aspect ratio",
                field="continuation_source.aspect_ratio",
                value=self.aspect_ratio,
            )

    def video_reference(self) -> Dict[str, str]:
        """Video object as the remote API expects it in a request instance."""
        reference = {"uri": self.video_uri}
        if self.mime_type:
            reference["mimeType"] = self.mime_type
        return reference

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation_name": self.operation_name,
            "video_uri": self.video_uri,
            "aspect_ratio": self.aspect_ratio.value,
            "resolution": self.resolution.value,
            "model": self.model.value,
        }


@dataclass
class GenerationRequest:
    """Request parameters for one scene."""

    prompt: str
    model: ModelVariant = ModelVariant.FAST
    resolution: Resolution = Resolution.P720
    aspect_ratio: AspectRatio = AspectRatio.LANDSCAPE

    # Set for scene 2; overrides aspect_ratio
    continuation_source: Optional[ContinuationSource] = None

    def __post_init__(self):
        """Normalize enum fields and clean the prompt."""
        self.prompt = sanitize_prompt(self.prompt or "")
        self.model = ModelVariant.parse(self.model)
        self.resolution = Resolution.parse(self.resolution)
        self.aspect_ratio = AspectRatio.parse(self.aspect_ratio)

    @property
    def is_continuation(self) -> bool:
        return self.continuation_source is not None

    @property
    def effective_aspect_ratio(self) -> AspectRatio:
        """The aspect ratio actually sent; a continuation inherits its source's."""
        if self.continuation_source is not None:
            return self.continuation_source.aspect_ratio
        return self.aspect_ratio

    def validate(self) -> None:
        """Check preconditions that must hold before anything is sent."""
        if not self.prompt.strip():
            raise ValidationError(
                "Prompt cannot be empty",
                field="prompt",
                constraint="non-empty after trimming",
            )
        if self.continuation_source is not None:
            self.continuation_source.validate()


@dataclass
class OperationHandle:
    """
    Server-assigned long-running operation.

    Callers hold on to it only to pass it back; its payload is opaque.
    """

    name: str
    done: bool = False
    error: Optional[Dict[str, Any]] = None
    response: Optional[Dict[str, Any]] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "OperationHandle":
        return cls(
            name=data.get("name", ""),
            done=bool(data.get("done", False)),
            error=data.get("error"),
            response=data.get("response"),
        )

    def first_video(self) -> Optional[Dict[str, Any]]:
        """
        Return the first generated video object, if any.

        Handles both the REST shape (generateVideoResponse.generatedSamples)
        and the SDK shape (generatedVideos).
        """
        response = self.response or {}
        samples = (response.get("generateVideoResponse") or {}).get("generatedSamples")
        if samples is None:
            samples = response.get("generatedVideos")
        if not samples:
            return None
        video = samples[0].get("video") if isinstance(samples[0], dict) else None
        return video or None


@dataclass(frozen=True)
class FetchedAsset:
    """Raw bytes of a downloaded asset."""

    data: bytes
    mime_type: str = "video/mp4"


# =============================================================================
# Base Client
# =============================================================================


class BaseVeoClient(ABC):
    """
    Abstract remote generation API.

    Subclasses implement three calls: create a job, read its status, and
    download an asset. The HTTP client is created lazily and shared.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Base URL for the API
            timeout: Per-request timeout in seconds
            transport: Custom httpx transport (used by tests)
        """
        self.base_url = (base_url or self._get_default_base_url()).rstrip("/")
        self.timeout = timeout
        self._transport = transport

        self._client: Optional[httpx.AsyncClient] = None
        self._client_lock = asyncio.Lock()

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    def _get_default_base_url(self) -> str:
        """Return the default base URL for this provider."""
        pass

    @abstractmethod
    async def create_generation_job(
        self,
        request: GenerationRequest,
        credential: str,
    ) -> OperationHandle:
        """Submit a generation job and return its operation."""
        pass

    @abstractmethod
    async def get_job_status(
        self,
        handle: OperationHandle,
        credential: str,
    ) -> OperationHandle:
        """Fetch the current state of an operation."""
        pass

    @abstractmethod
    async def fetch_asset(self, uri: str, credential: str) -> "FetchedAsset":
        """Download the bytes behind a generated video URI."""
        pass

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.timeout),
                    headers={"Content-Type": "application/json"},
                    transport=self._transport,
                )
            return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        async with self._client_lock:
            if self._client:
                await self._client.aclose()
                self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
