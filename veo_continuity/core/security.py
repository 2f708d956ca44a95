"""
Security Utilities
==================

Path validation, input sanitization, and credential redaction.
"""

import re
import logging
from pathlib import Path
from typing import Optional, Union, Set
from urllib.parse import urlparse

from .exceptions import SecurityError

logger = logging.getLogger(__name__)


class PathValidator:
    """
    Validates output paths to prevent directory traversal.

    Usage:
        validator = PathValidator(base_path="./output")
        safe_path = validator.validate_video("scene_1.mp4")  # OK
        safe_path = validator.validate("../../etc/passwd")  # Raises SecurityError
    """

    DANGEROUS_PATTERNS = [
        r"\.\./",  # Parent directory traversal
        r"\.\.\\",  # Windows parent directory
        r"^~",  # Home directory expansion
        r"\x00",  # Null bytes
        r"%2e%2e",  # URL-encoded traversal
        r"%252e",  # Double-encoded
    ]

    ALLOWED_VIDEO_EXTENSIONS = {".mp4", ".webm", ".mov"}

    def __init__(
        self,
        base_path: Union[str, Path],
        allowed_extensions: Optional[Set[str]] = None,
    ):
        """
        Initialize the path validator.

        Args:
            base_path: The base directory that all paths must be within
            allowed_extensions: Set of allowed file extensions (None = all allowed)
        """
        self.base_path = Path(base_path).resolve()
        self.allowed_extensions = allowed_extensions
        self._compiled_patterns = [re.compile(p, re.IGNORECASE) for p in self.DANGEROUS_PATTERNS]

    def validate(self, path: Union[str, Path]) -> Path:
        """
        Validate a path and return the resolved safe path.

        Raises:
            SecurityError: If path escapes the base directory
        """
        path_str = str(path)

        for pattern in self._compiled_patterns:
            if pattern.search(path_str):
                logger.warning(f"Blocked dangerous path pattern: {pattern.pattern}")
                raise SecurityError(
                    "Path contains dangerous pattern",
                    attempted_path=path_str,
                    security_type="path_traversal",
                )

        try:
            if Path(path).is_absolute():
                resolved = Path(path).resolve()
            else:
                resolved = (self.base_path / path).resolve()
        except (ValueError, OSError) as e:
            raise SecurityError(
                f"Invalid path: {e}",
                attempted_path=path_str,
                security_type="invalid_path",
            )

        try:
            resolved.relative_to(self.base_path)
        except ValueError:
            logger.warning(f"Blocked path outside base directory: {resolved}")
            raise SecurityError(
                "Path is outside allowed directory",
                attempted_path=path_str,
                security_type="path_traversal",
            )

        if self.allowed_extensions and resolved.suffix.lower() not in self.allowed_extensions:
            raise SecurityError(
                f"File extension not allowed: {resolved.suffix}",
                attempted_path=path_str,
                security_type="invalid_extension",
            )

        return resolved

    def validate_video(self, path: Union[str, Path]) -> Path:
        """Validate a video file path."""
        resolved = self.validate(path)
        if resolved.suffix.lower() not in self.ALLOWED_VIDEO_EXTENSIONS:
            raise SecurityError(
                f"Not a valid video extension: {resolved.suffix}",
                attempted_path=str(path),
                security_type="invalid_extension",
            )
        return resolved


def sanitize_filename(filename: str, max_length: int = 255) -> str:
    """
    Sanitize a filename by removing dangerous characters.

    Args:
        filename: Original filename
        max_length: Maximum allowed length

    Returns:
        Sanitized filename safe for filesystem operations
    """
    if not filename:
        return "unnamed"

    # Keep: alphanumeric, underscore, hyphen, dot, space
    sanitized = re.sub(r"[^\w\-. ]", "_", filename)
    sanitized = re.sub(r"[_\s]+", "_", sanitized)
    sanitized = sanitized.strip("._- ")

    if len(sanitized) > max_length:
        name = Path(sanitized).stem
        ext = Path(sanitized).suffix
        sanitized = name[:max_length - len(ext)] + ext

    if not sanitized or sanitized in (".", ".."):
        sanitized = "unnamed"

    return sanitized


def sanitize_prompt(prompt: str) -> str:
    """
    Strip control characters and surrounding whitespace from a prompt.

    Returns an empty string for blank input so callers can reject it.
    """
    if not prompt:
        return ""

    sanitized = "".join(char for char in prompt if char.isprintable() or char in "\n\t")

    return sanitized.strip()


def redact_api_key(text: str, secret: Optional[str] = None) -> str:
    """
    Redact API keys from text before it is logged or raised.

    Args:
        text: Text that might contain API keys
        secret: A known credential value to scrub verbatim

    Returns:
        Text with API keys redacted
    """
    if not text:
        return text

    result = text
    if secret:
        result = result.replace(secret, "***REDACTED***")

    patterns = [
        # Google API keys
        (r"AIza[A-Za-z0-9_\-]{35}", "AIza***REDACTED***"),
        # Query-string keys on download links
        (r"([?&]key=)[^&\s]+", r"\1***REDACTED***"),
        (r"x-goog-api-key['\"]?\s*[:=]\s*['\"]?[A-Za-z0-9_\-]+", "x-goog-api-key: ***REDACTED***"),
        (r"(GEMINI_API_KEY|GOOGLE_API_KEY|API_KEY)=[^\s]+", r"\1=***REDACTED***"),
    ]

    for pattern, replacement in patterns:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE)

    return result


def validate_url(url: str, allowed_schemes: Set[str] = frozenset({"http", "https"})) -> str:
    """
    Validate a download URL returned by the remote API.

    Raises:
        SecurityError: If the URL is empty or uses an unexpected scheme
    """
    if not url:
        raise SecurityError("Empty URL", security_type="invalid_url")

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise SecurityError(f"Invalid URL format: {e}", security_type="invalid_url")

    if parsed.scheme not in allowed_schemes:
        raise SecurityError(
            f"Invalid URL scheme: {parsed.scheme}",
            security_type="invalid_url_scheme",
        )

    return url
