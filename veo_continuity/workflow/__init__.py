"""
Workflow Module
===============

Generation orchestration, credentials, and the two-scene session.
"""

from .credentials import (
    CredentialGate,
    CredentialProvider,
    EnvCredentialProvider,
    StaticCredentialProvider,
)
from .orchestrator import (
    CancellationToken,
    GenerationOrchestrator,
    GenerationResult,
    PollState,
)
from .resources import ResourceRegistry, VideoResource
from .session import ContinuitySession, check_continuation_rules

__all__ = [
    "CancellationToken",
    "ContinuitySession",
    "CredentialGate",
    "CredentialProvider",
    "EnvCredentialProvider",
    "GenerationOrchestrator",
    "GenerationResult",
    "PollState",
    "ResourceRegistry",
    "StaticCredentialProvider",
    "VideoResource",
    "check_continuation_rules",
]
