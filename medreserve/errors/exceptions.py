# =============================================================================
# medreserve/errors/exceptions.py
# Error types raised by the MedReserve client core
# =============================================================================

from typing import Any, Dict, Iterable, Optional


def _details(extra: Optional[Dict[str, Any]] = None, **fields: Any) -> Dict[str, Any]:
    """Merge ``fields`` into ``extra``, leaving out the ones that are None."""
    merged = dict(extra or {})
    merged.update({key: value for key, value in fields.items() if value is not None})
    return merged


class MedReserveError(Exception):
    """
    Root of every error the client raises on purpose.

    ``code`` is stable and machine-readable (``API_001``...), ``details``
    holds whatever context helps a log reader, and ``recoverable`` tells
    the page whether retrying or carrying on makes sense.
    """

    code = "MR_000"
    recoverable = True

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: Optional[bool] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})
        if code is not None:
            self.code = code
        if recoverable is not None:
            self.recoverable = recoverable

    def __str__(self) -> str:
        text = f"[{self.code}] {self.message}"
        return f"{text} | Details: {self.details}" if self.details else text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# HTTP
# =============================================================================

class ApiRequestError(MedReserveError):
    """Non-2xx answer from the backend."""

    code = "API_001"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        backend_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        super().__init__(
            message,
            details=_details(details, status_code=status_code, url=url, backend_message=backend_message),
            **kwargs,
        )
        self.status_code = status_code
        self.backend_message = backend_message


class AuthenticationError(ApiRequestError):
    """HTTP 401: the session token is missing, expired or revoked."""

    code = "AUTH_001"

    def __init__(self, message: str = "Session expired or invalid", status_code: int = 401, **kwargs):
        super().__init__(message, status_code=status_code, **kwargs)


class NetworkError(MedReserveError):
    """The request never got an HTTP answer (timeout, DNS, refused)."""

    code = "API_002"

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        super().__init__(message, details=_details(details, url=url, timeout=timeout), **kwargs)


# =============================================================================
# PAYLOADS AND RESOURCES
# =============================================================================

class MalformedPayloadError(MedReserveError):
    """A 2xx response whose body is not the shape the caller needs."""

    code = "DATA_001"

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        expected: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        super().__init__(message, details=_details(details, source=source, expected=expected), **kwargs)


class UnknownResourceError(MedReserveError):
    """No fetch strategy is registered under this resource name."""

    code = "RESOURCE_001"
    recoverable = False

    def __init__(self, resource: str, known: Optional[Iterable[str]] = None, **kwargs):
        super().__init__(
            f"Unknown resource: {resource}",
            details=_details(resource=resource, known=sorted(known) if known else None),
            **kwargs,
        )
        self.resource = resource


class ConfigurationError(MedReserveError):
    """A client setting is missing or unusable."""

    code = "CONFIG_001"
    recoverable = False

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, details=_details(config_key=config_key, expected_type=expected_type), **kwargs)
