# =============================================================================
# medreserve/errors/__init__.py
# Centralized Error Handling for the MedReserve client core
# =============================================================================

from .exceptions import (
    MedReserveError,
    ApiRequestError,
    NetworkError,
    AuthenticationError,
    MalformedPayloadError,
    UnknownResourceError,
    ConfigurationError,
)

from .handlers import (
    handle_error,
    safe_execute,
    user_message_for,
    error_boundary,
    ErrorContext,
)

__all__ = [
    # Exceptions
    "MedReserveError",
    "ApiRequestError",
    "NetworkError",
    "AuthenticationError",
    "MalformedPayloadError",
    "UnknownResourceError",
    "ConfigurationError",
    # Handlers
    "handle_error",
    "safe_execute",
    "user_message_for",
    "error_boundary",
    "ErrorContext",
]
