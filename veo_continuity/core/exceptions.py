"""
Custom Exceptions
=================

Unified exception hierarchy for the generation workflow. Every failure
reaches the caller as one of these types; nothing is retried or swallowed.
"""

from typing import Optional, Dict, Any


# Upstream codes that mean the active credential cannot reach the model.
# HTTP statuses come from rejected requests, gRPC codes from operation errors.
CREDENTIAL_HTTP_STATUSES = {"NOT_FOUND", "PERMISSION_DENIED", "UNAUTHENTICATED"}
CREDENTIAL_RPC_CODES = {5, 7, 16}


class StudioError(Exception):
    """Base exception for all Veo Continuity errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        self.recoverable = recoverable

    @property
    def invalidates_credential(self) -> bool:
        """Whether the caller should drop the stored credential and re-select."""
        return False

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


class ConfigurationError(StudioError):
    """Configuration-related errors, including a missing credential."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details=details, **kwargs)


class ValidationError(StudioError):
    """Input validation errors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)[:100]
        if constraint:
            details["constraint"] = constraint
        super().__init__(message, details=details, **kwargs)


class InvalidContinuationError(ValidationError):
    """Prior scene state is missing, malformed, or incompatible."""

    def __init__(self, message: str, violations: Optional[list] = None, **kwargs):
        details = kwargs.pop("details", {})
        if violations:
            details["violations"] = list(violations)
        super().__init__(message, details=details, **kwargs)
        self.violations = list(violations or [])


class UpstreamRequestError(StudioError):
    """The remote API rejected a request."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        upstream_status: Optional[str] = None,
        response_body: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if status_code:
            details["status_code"] = status_code
        if upstream_status:
            details["upstream_status"] = upstream_status
        if response_body:
            details["response_body"] = response_body[:500]
        super().__init__(message, details=details, **kwargs)
        self.status_code = status_code
        self.upstream_status = upstream_status

    @property
    def invalidates_credential(self) -> bool:
        if self.upstream_status:
            return self.upstream_status in CREDENTIAL_HTTP_STATUSES
        return self.status_code in (401, 403)


class GenerationFailedError(StudioError):
    """The operation finished with an error payload instead of a result."""

    def __init__(
        self,
        message: str,
        operation_name: Optional[str] = None,
        upstream_code: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if operation_name:
            details["operation_name"] = operation_name
        if upstream_code is not None:
            details["upstream_code"] = upstream_code
        super().__init__(message, details=details, **kwargs)
        self.operation_name = operation_name
        self.upstream_code = upstream_code

    @property
    def invalidates_credential(self) -> bool:
        return self.upstream_code in CREDENTIAL_RPC_CODES


class MissingResultError(StudioError):
    """The operation succeeded but carried no video reference."""

    def __init__(self, message: str, operation_name: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if operation_name:
            details["operation_name"] = operation_name
        super().__init__(message, details=details, **kwargs)


class AssetFetchError(StudioError):
    """Downloading the generated video bytes failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        details = kwargs.pop("details", {})
        if status_code:
            details["status_code"] = status_code
        recoverable = kwargs.pop("recoverable", status_code in (429, 500, 502, 503, 504))
        super().__init__(message, details=details, recoverable=recoverable, **kwargs)
        self.status_code = status_code


class GenerationCancelledError(StudioError):
    """The caller cancelled the generation while it was being polled."""

    def __init__(self, message: str, operation_name: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if operation_name:
            details["operation_name"] = operation_name
        super().__init__(message, details=details, **kwargs)


class GenerationTimeoutError(StudioError):
    """The polling deadline passed before the operation finished."""

    def __init__(
        self,
        message: str,
        operation_name: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if operation_name:
            details["operation_name"] = operation_name
        if timeout_seconds:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(message, recoverable=True, details=details, **kwargs)


class ResourceNotFoundError(StudioError):
    """Video resource was released or never existed."""

    def __init__(self, message: str, resource_id: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message, details=details, **kwargs)


class SecurityError(StudioError):
    """Security-related errors (path traversal and similar)."""

    def __init__(
        self,
        message: str,
        attempted_path: Optional[str] = None,
        security_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if attempted_path:
            # Don't expose full paths in error details
            details["attempted_path"] = "***REDACTED***"
        if security_type:
            details["security_type"] = security_type
        super().__init__(message, recoverable=False, details=details, **kwargs)
