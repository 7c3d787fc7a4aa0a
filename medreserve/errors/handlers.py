# =============================================================================
# medreserve/errors/handlers.py
# Turning client errors into log records and on-page messages
# =============================================================================

from __future__ import annotations
import functools
from typing import Any, Callable, Optional, TypeVar

import streamlit as st

from medreserve.logging import get_logger
from .exceptions import ApiRequestError, AuthenticationError, MedReserveError, NetworkError

logger = get_logger(__name__)

T = TypeVar("T")

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."
SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."


def user_message_for(error: BaseException, default: Optional[str] = None) -> str:
    """
    Message to show for a failed write-path call.

    The backend's own error text wins when the response body carried one,
    then the transport message, then ``default`` or a generic message.
    """
    if isinstance(error, ApiRequestError) and error.backend_message:
        return error.backend_message
    if isinstance(error, AuthenticationError):
        return SESSION_EXPIRED_MESSAGE
    if isinstance(error, NetworkError):
        return error.message
    return default or GENERIC_ERROR_MESSAGE


def handle_error(
    error: BaseException,
    show_user_message: bool = True,
    user_message: Optional[str] = None,
) -> str:
    """
    Log ``error`` and optionally show it with ``st.error``.

    Recoverable client errors (a refused booking, a timeout) are warnings;
    anything else is logged with its traceback. Returns the user-facing
    message.
    """
    if isinstance(error, MedReserveError):
        message = user_message or user_message_for(error, error.message)
        recoverable = error.recoverable
        logger.warning(f"[{error.code}] {error.message} {error.details or ''}".rstrip())
    else:
        message = user_message or user_message_for(error)
        recoverable = True
        logger.error(f"Unexpected {type(error).__name__}: {error}", exc_info=error)

    if show_user_message:
        if recoverable:
            st.error(f"Error: {message}")
        else:
            st.error(f"Critical Error: {message}. Please contact support.")
    return message


def safe_execute(
    func: Callable[..., T],
    *args,
    default: Optional[T] = None,
    error_message: Optional[str] = None,
    reraise: bool = False,
    **kwargs,
) -> Optional[T]:
    """
    Call ``func`` and report any failure on the page.

    Usage:
        booked = safe_execute(client.appointments.book, payload,
                              error_message="Could not book the appointment")
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        handle_error(e, user_message=error_message)
        if reraise:
            raise
        return default


class ErrorContext:
    """
    Wraps one user action, e.g. cancelling an appointment.

    A recoverable failure is reported and swallowed; ``error`` and
    ``message`` keep what happened so the page can react.

    Usage:
        with ErrorContext("Cancelling appointment", show_success=True) as ctx:
            client.appointments.cancel(appointment_id, reason)
        if ctx.error is None:
            ...
    """

    def __init__(
        self,
        operation: str,
        recoverable: bool = True,
        show_success: bool = False,
        success_message: Optional[str] = None,
    ):
        self.operation = operation
        self.recoverable = recoverable
        self.show_success = show_success
        self.success_message = success_message
        self.error: Optional[BaseException] = None
        self.message: Optional[str] = None

    def __enter__(self) -> ErrorContext:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_val is None:
            logger.debug(f"{self.operation} succeeded")
            if self.show_success:
                st.success(self.success_message or f"{self.operation} succeeded")
            return False

        self.error = exc_val
        self.message = handle_error(
            exc_val,
            user_message=None if isinstance(exc_val, MedReserveError) else f"{self.operation} failed",
        )
        return self.recoverable


def error_boundary(default_return: Any = None, error_message: Optional[str] = None):
    """
    Decorator for page widgets that may render without their data.

    Usage:
        @error_boundary(default_return={}, error_message="Wellness score unavailable")
        def load_wellness_score() -> dict:
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., Optional[T]]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Optional[T]:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                handle_error(e, show_user_message=False)
                if error_message:
                    st.error(error_message)
                return default_return

        return wrapper

    return decorator
