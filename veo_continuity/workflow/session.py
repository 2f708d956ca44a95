"""
Continuity Session
==================

Two-scene workflow on top of the orchestrator. Holds the current scene
results, applies the rules a continuation must satisfy, and releases
videos that a newer generation supersedes.
"""

import logging
from typing import List, Optional, Union

from ..api.base import AspectRatio, GenerationRequest, ModelVariant, Resolution
from ..core.exceptions import InvalidContinuationError, StudioError, ValidationError
from .credentials import CredentialGate
from .orchestrator import CancellationToken, GenerationOrchestrator, GenerationResult

logger = logging.getLogger(__name__)


# Only the standard model at 720p can extend a video
CONTINUATION_MODEL = ModelVariant.STANDARD
CONTINUATION_RESOLUTION = Resolution.P720


def check_continuation_rules(
    scene1: GenerationResult,
    model: ModelVariant,
    resolution: Resolution,
) -> List[str]:
    """Return every rule the proposed continuation breaks."""
    violations = []
    if scene1.request.resolution is not CONTINUATION_RESOLUTION:
        violations.append(f"Scene 1 must be {CONTINUATION_RESOLUTION.value}.")
    if model is not CONTINUATION_MODEL:
        violations.append(f"Scene 2 must use the '{CONTINUATION_MODEL.value}' model.")
    if resolution is not CONTINUATION_RESOLUTION:
        violations.append(f"Scene 2 must use '{CONTINUATION_RESOLUTION.value}' resolution.")
    return violations


class ContinuitySession:
    """
    Scene 1 / scene 2 state for one user.

    Regenerating scene 1 discards scene 2. Errors that mean the credential
    cannot reach the model invalidate the gate before they propagate.
    """

    def __init__(
        self,
        orchestrator: GenerationOrchestrator,
        gate: Optional[CredentialGate] = None,
    ):
        self.orchestrator = orchestrator
        self.gate = gate
        self.scene1: Optional[GenerationResult] = None
        self.scene2: Optional[GenerationResult] = None
        self.hint: Optional[str] = None

    @property
    def can_continue(self) -> bool:
        return self.scene1 is not None

    async def generate_scene1(
        self,
        prompt: str,
        model: Union[ModelVariant, str] = ModelVariant.FAST,
        resolution: Union[Resolution, str] = Resolution.P720,
        aspect_ratio: Union[AspectRatio, str] = AspectRatio.LANDSCAPE,
        cancel_token: Optional[CancellationToken] = None,
    ) -> GenerationResult:
        """Generate the opening scene, replacing both previous scenes."""
        request = GenerationRequest(
            prompt=prompt,
            model=model,
            resolution=resolution,
            aspect_ratio=aspect_ratio,
        )
        if not request.prompt:
            raise ValidationError("Scene 1 prompt cannot be empty.", field="prompt")

        self.hint = None
        self._discard_scene2()
        if self.scene1 is not None:
            self.scene1.release()
            self.scene1 = None

        result = await self._run(self.orchestrator.run_scene(request, cancel_token=cancel_token))
        self.scene1 = result

        if request.resolution is not CONTINUATION_RESOLUTION:
            self.hint = (
                f"Scene 1 was generated at {request.resolution.value}. To create a direct "
                f"continuation, Scene 1 must be generated at {CONTINUATION_RESOLUTION.value}."
            )
            logger.warning(self.hint)
        return result

    async def generate_scene2(
        self,
        prompt: str,
        resolution: Union[Resolution, str] = Resolution.P720,
        cancel_token: Optional[CancellationToken] = None,
    ) -> GenerationResult:
        """Generate the continuation of scene 1, always on the standard model."""
        request = GenerationRequest(prompt=prompt, model=CONTINUATION_MODEL, resolution=resolution)
        if not request.prompt:
            raise ValidationError("Scene 2 prompt cannot be empty.", field="prompt")
        if self.scene1 is None:
            raise InvalidContinuationError("Scene 1 must be generated before Scene 2.")

        violations = check_continuation_rules(self.scene1, request.model, request.resolution)
        if violations:
            raise InvalidContinuationError(
                "Continuation requirements not met: " + " ".join(violations),
                violations=violations,
            )

        self._discard_scene2()
        result = await self._run(
            self.orchestrator.run_continuation(request, self.scene1, cancel_token=cancel_token)
        )
        self.scene2 = result
        return result

    def cancel(self) -> bool:
        """Cancel whichever scene is generating."""
        return self.orchestrator.cancel()

    def close(self) -> None:
        """Release every video this session produced."""
        self._discard_scene2()
        if self.scene1 is not None:
            self.scene1.release()
            self.scene1 = None

    async def _run(self, generation) -> GenerationResult:
        try:
            return await generation
        except StudioError as e:
            if self.gate is not None and self.gate.handle_error(e):
                logger.warning(f"Credential rejected by the API: {e.message}")
            raise

    def _discard_scene2(self) -> None:
        if self.scene2 is not None:
            self.scene2.release()
            self.scene2 = None
