"""
Credential Providers
====================

The orchestrator reads its API key from an injected provider. CredentialGate
owns the one-time interactive selection and drops the key when the API
reports that it cannot reach the model.
"""

import os
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence

from ..core.exceptions import StudioError

logger = logging.getLogger(__name__)


DEFAULT_ENV_NAMES = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


class CredentialProvider(ABC):
    """Source of the API key."""

    @abstractmethod
    def get_credential(self) -> Optional[str]:
        """Return the key, or None when none is available."""
        pass

    def invalidate(self) -> None:
        """Forget the key so it is selected again. No-op by default."""


class StaticCredentialProvider(CredentialProvider):
    def __init__(self, credential: Optional[str]):
        self._credential = credential

    def get_credential(self) -> Optional[str]:
        return self._credential or None


class EnvCredentialProvider(CredentialProvider):
    """Reads the first non-empty variable from the process environment."""

    def __init__(self, names: Sequence[str] = DEFAULT_ENV_NAMES):
        self.names = tuple(names)

    def get_credential(self) -> Optional[str]:
        for name in self.names:
            value = os.getenv(name)
            if value:
                return value
        return None


class CredentialGate(CredentialProvider):
    """
    One-time credential selection.

    The selector is called at most once per selection cycle; a returned
    value is taken as selected. Until then the fallback provider, if any,
    supplies the key.
    """

    def __init__(
        self,
        selector: Callable[[], Optional[str]],
        fallback: Optional[CredentialProvider] = None,
    ):
        self._selector = selector
        self._fallback = fallback
        self._selected: Optional[str] = None

    @property
    def has_selected_credential(self) -> bool:
        return self._selected is not None

    def select(self) -> bool:
        """Run the interactive selection. Returns whether a key was chosen."""
        value = self._selector()
        if value:
            self._selected = value
            logger.info("Credential selected")
            return True
        logger.warning("Credential selection returned no key")
        return False

    def get_credential(self) -> Optional[str]:
        if self._selected is None and self._fallback is not None:
            return self._fallback.get_credential()
        return self._selected

    def invalidate(self) -> None:
        if self._selected is not None:
            logger.warning("Invalidating selected credential; selection required again")
        self._selected = None
        if self._fallback is not None:
            self._fallback.invalidate()

    def handle_error(self, error: BaseException) -> bool:
        """Invalidate when the error says the key cannot reach the model."""
        if isinstance(error, StudioError) and error.invalidates_credential:
            self.invalidate()
            return True
        return False
