# =============================================================================
# medreserve/services/base_service.py
# Shared plumbing for session-level services
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from medreserve.errors import MedReserveError, handle_error
from medreserve.logging import LogContext, get_logger

ProgressCallback = Callable[[int, str], None]


@dataclass
class ServiceResult:
    """Outcome of a service call that must not raise into the page."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, data: Any = None, metadata: Optional[Dict[str, Any]] = None) -> ServiceResult:
        return cls(True, data=data, metadata=dict(metadata or {}))

    @classmethod
    def fail(cls, error: str, error_code: str = "UNEXPECTED", metadata: Optional[Dict[str, Any]] = None) -> ServiceResult:
        return cls(False, error=error, error_code=error_code, metadata=dict(metadata or {}))

    @classmethod
    def from_exception(cls, e: BaseException, metadata: Optional[Dict[str, Any]] = None) -> ServiceResult:
        """Failed result carrying the error's code and details; ``metadata`` wins on clashes."""
        if isinstance(e, MedReserveError):
            return cls.fail(e.message, e.code, {**e.details, **(metadata or {})})
        return cls.fail(str(e) or type(e).__name__, metadata=metadata)


class BaseService:
    """
    Base for services that sit between the pages and the API modules.

    Subclasses get a logger under the ``medreserve`` hierarchy (so token
    redaction applies), an optional progress callback and ``safe_execute``
    for calls whose failure should become a ``ServiceResult``.
    """

    def __init__(self):
        self.logger = get_logger(f"medreserve.services.{type(self).__name__}")
        self._progress_callback: Optional[ProgressCallback] = None

    def set_progress_callback(self, callback: Optional[ProgressCallback]) -> None:
        """``callback(percentage, message)``, e.g. bound to ``st.progress``."""
        self._progress_callback = callback

    def _update_progress(self, percentage: int, message: str = "") -> None:
        if self._progress_callback is not None:
            self._progress_callback(percentage, message)

    def log_operation(self, operation: str) -> LogContext:
        return LogContext(self.logger, operation)

    def safe_execute(self, operation: str, func: Callable[..., Any], *args, **kwargs) -> ServiceResult:
        try:
            with self.log_operation(operation):
                return ServiceResult.ok(func(*args, **kwargs))
        except MedReserveError as e:
            handle_error(e, show_user_message=False)
            return ServiceResult.from_exception(e)
        except Exception as e:
            self.logger.exception(f"{operation} raised unexpectedly")
            return ServiceResult.from_exception(e)
