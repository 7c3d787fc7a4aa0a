# =============================================================================
# medreserve/offline/__init__.py
# Online/Offline detection
# =============================================================================

from .connection_manager import (
    ConnectionManager,
    ConnectionState,
    ConnectionStatus,
)

__all__ = [
    "ConnectionManager",
    "ConnectionState",
    "ConnectionStatus",
]
