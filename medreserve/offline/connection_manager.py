# =============================================================================
# medreserve/offline/connection_manager.py
# Online/offline status of the MedReserve backend
# =============================================================================
"""
ConnectionManager - whether the backend is currently reachable.

The status flips either by hand (``set_online`` / ``set_offline``, e.g. from
a page-level network indicator) or from TCP probes against the API host,
run once with ``check_connection`` or periodically on a monitor thread.
Listeners get an immutable ``ConnectionState`` snapshot on every change.
"""

from __future__ import annotations
import socket
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlparse

from medreserve.logging import get_logger

logger = get_logger(__name__)


class ConnectionStatus(Enum):
    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(frozen=True)
class ConnectionState:
    status: ConnectionStatus
    changed_at: Optional[datetime] = None
    last_probe: Optional[datetime] = None
    failed_probes: int = 0
    error_message: Optional[str] = None

    @property
    def is_online(self) -> bool:
        return self.status is ConnectionStatus.ONLINE


ConnectionListener = Callable[[ConnectionState], None]


class ConnectionManager:
    """
    Usage:
        connection = ConnectionManager("http://localhost:8080/api")
        connection.register_callback(lambda state: print(state.status))
        connection.start_monitoring()
    """

    PROBE_TIMEOUT = 5           # seconds per TCP connect
    ONLINE_INTERVAL = 30        # seconds between probes while online
    OFFLINE_INTERVAL = 10       # seconds between probes while offline
    FAILURE_THRESHOLD = 2       # failed probes before the monitor declares offline

    def __init__(self, api_base_url: Optional[str] = None, online: bool = True):
        self._target = self._probe_target(api_base_url)
        self._state = ConnectionState(ConnectionStatus.ONLINE if online else ConnectionStatus.OFFLINE)
        self._listeners: List[ConnectionListener] = []
        self._lock = threading.Lock()
        self._monitor: Optional[threading.Thread] = None
        self._halt = threading.Event()

    @staticmethod
    def _probe_target(url: Optional[str]) -> Optional[Tuple[str, int]]:
        if not url:
            return None
        parsed = urlparse(url)
        if not parsed.hostname:
            return None
        return parsed.hostname, parsed.port or (443 if parsed.scheme == "https" else 80)

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def status(self) -> ConnectionStatus:
        return self._state.status

    @property
    def is_online(self) -> bool:
        return self._state.is_online

    @property
    def is_offline(self) -> bool:
        return not self._state.is_online

    # -------------------------------------------------------------------------
    # Status changes
    # -------------------------------------------------------------------------

    def set_online(self) -> None:
        self._update(ConnectionStatus.ONLINE)

    def set_offline(self) -> None:
        self._update(ConnectionStatus.OFFLINE)

    def _update(self, status: ConnectionStatus, **probe_fields) -> ConnectionState:
        with self._lock:
            previous = self._state
            changed = previous.status is not status
            self._state = replace(
                previous,
                status=status,
                changed_at=datetime.now() if changed else previous.changed_at,
                **probe_fields,
            )
            snapshot = self._state

        if changed:
            if snapshot.is_online:
                logger.info("Backend reachable again, cached data will be refreshed")
            else:
                logger.warning("Backend unreachable, serving cached data")
            self._notify(snapshot)
        return snapshot

    def _notify(self, snapshot: ConnectionState) -> None:
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Connection listener {listener!r} failed: {e}")

    # -------------------------------------------------------------------------
    # Probing
    # -------------------------------------------------------------------------

    def check_connection(self, threshold: int = 1) -> ConnectionState:
        """
        Probe the API host once and record the result.

        ``threshold`` is how many consecutive failures it takes to go
        offline; a single success always brings the status back online.
        """
        now = datetime.now()
        error = self._probe()
        if error is None:
            return self._update(ConnectionStatus.ONLINE, last_probe=now, failed_probes=0, error_message=None)

        failures = self._state.failed_probes + 1
        status = ConnectionStatus.OFFLINE if failures >= threshold else self._state.status
        return self._update(status, last_probe=now, failed_probes=failures, error_message=error)

    def _probe(self) -> Optional[str]:
        """None when the host accepts a TCP connection, else the error text."""
        if self._target is None:
            return None
        try:
            with socket.create_connection(self._target, timeout=self.PROBE_TIMEOUT):
                return None
        except OSError as e:
            logger.debug(f"Probe of {self._target[0]}:{self._target[1]} failed: {e}")
            return str(e)

    def start_monitoring(self) -> None:
        if self._monitor is not None and self._monitor.is_alive():
            return
        self._halt.clear()
        self._monitor = threading.Thread(target=self._monitor_loop, name="medreserve-connection", daemon=True)
        self._monitor.start()

    def stop_monitoring(self, timeout: float = 5.0) -> None:
        self._halt.set()
        if self._monitor is not None and self._monitor is not threading.current_thread():
            self._monitor.join(timeout)

    def _monitor_loop(self) -> None:
        while not self._halt.wait(self.ONLINE_INTERVAL if self.is_online else self.OFFLINE_INTERVAL):
            try:
                self.check_connection(self.FAILURE_THRESHOLD)
            except Exception as e:
                logger.error(f"Connection probe crashed: {e}")

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def register_callback(self, callback: ConnectionListener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unregister_callback(self, callback: ConnectionListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def get_status_display(self) -> dict:
        state = self._state
        return {
            "status": state.status.value,
            "is_online": state.is_online,
            "changed_at": state.changed_at.isoformat() if state.changed_at else None,
            "last_probe": state.last_probe.isoformat() if state.last_probe else None,
            "failed_probes": state.failed_probes,
            "error": state.error_message,
        }
