"""
Veo Continuity
==============

Generate a video scene with Veo, then a second scene that continues it.

Features:
- Long-running operation orchestration (submit, poll, download)
- Continuation scenes that inherit the first scene's video and aspect ratio
- Cancellable polling with an optional deadline
- Typed errors for every failure, with credential invalidation signals

Quick Start:
    from veo_continuity import (
        ContinuitySession,
        EnvCredentialProvider,
        GenerationOrchestrator,
        GoogleVeoClient,
    )

    async with GoogleVeoClient() as client:
        orchestrator = GenerationOrchestrator(client, EnvCredentialProvider())
        session = ContinuitySession(orchestrator)
        scene1 = await session.generate_scene1("A red ball bouncing")
        scene2 = await session.generate_scene2("The ball rolls away")
"""

__version__ = "0.1.0"

from .api import (
    AspectRatio,
    ContinuationSource,
    GenerationRequest,
    GoogleVeoClient,
    ModelVariant,
    OperationHandle,
    Resolution,
)
from .core.config import Config, get_config
from .core.exceptions import (
    StudioError,
    ConfigurationError,
    ValidationError,
    InvalidContinuationError,
    UpstreamRequestError,
    GenerationFailedError,
    MissingResultError,
    AssetFetchError,
    GenerationCancelledError,
    GenerationTimeoutError,
    ResourceNotFoundError,
    SecurityError,
)
from .workflow import (
    CancellationToken,
    ContinuitySession,
    CredentialGate,
    EnvCredentialProvider,
    GenerationOrchestrator,
    GenerationResult,
    ResourceRegistry,
    StaticCredentialProvider,
    VideoResource,
)

__all__ = [
    "__version__",
    # API
    "AspectRatio",
    "ContinuationSource",
    "GenerationRequest",
    "GoogleVeoClient",
    "ModelVariant",
    "OperationHandle",
    "Resolution",
    # Core
    "Config",
    "get_config",
    # Exceptions
    "StudioError",
    "ConfigurationError",
    "ValidationError",
    "InvalidContinuationError",
    "UpstreamRequestError",
    "GenerationFailedError",
    "MissingResultError",
    "AssetFetchError",
    "GenerationCancelledError",
    "GenerationTimeoutError",
    "ResourceNotFoundError",
    "SecurityError",
    # Workflow
    "CancellationToken",
    "ContinuitySession",
    "CredentialGate",
    "EnvCredentialProvider",
    "GenerationOrchestrator",
    "GenerationResult",
    "ResourceRegistry",
    "StaticCredentialProvider",
    "VideoResource",
]
