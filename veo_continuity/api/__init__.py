"""
API Integration Layer
=====================

Remote video generation API used by the orchestrator.

Usage:
    from veo_continuity.api import GoogleVeoClient, GenerationRequest

    async with GoogleVeoClient() as client:
        handle = await client.create_generation_job(
            GenerationRequest(prompt="A red ball bouncing"),
            credential=api_key,
        )
"""

from .base import (
    AspectRatio,
    BaseVeoClient,
    ContinuationSource,
    FetchedAsset,
    GenerationRequest,
    ModelVariant,
    OperationHandle,
    Resolution,
)
from .google import GoogleVeoClient

__all__ = [
    "AspectRatio",
    "BaseVeoClient",
    "ContinuationSource",
    "FetchedAsset",
    "GenerationRequest",
    "GoogleVeoClient",
    "ModelVariant",
    "OperationHandle",
    "Resolution",
]
