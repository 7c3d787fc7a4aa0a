# =============================================================================
# medreserve/logging/__init__.py
# =============================================================================

from .config import (
    LogContext,
    TokenRedactingFilter,
    get_logger,
    redact,
    setup_logging,
)

__all__ = ["setup_logging", "get_logger", "LogContext", "TokenRedactingFilter", "redact"]
