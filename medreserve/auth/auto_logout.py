"""
Inactivity-based auto-logout.

The page shell calls ``record_activity()`` on every rerun triggered by user
input. When ``timeout`` seconds pass without one, the session is logged out,
the user is sent to /login and a notice is left in the session store for the
next render.
"""
import threading
import time
from typing import Callable, Optional

from medreserve.logging import get_logger
from medreserve.state import LOGOUT_NOTICE_KEY, SessionStore
from .navigation import LOGIN_PATH, navigate_to

logger = get_logger(__name__)

INACTIVITY_TIMEOUT = 5 * 60  # seconds
INACTIVITY_NOTICE = "You have been logged out due to inactivity."


class InactivityMonitor:
    """
    One-shot timer re-armed by user activity.

    Args:
        logout: ends the session (usually AuthService.logout)
        store: session store used for navigation and the notice
        timeout: seconds of inactivity before logout
        is_active: whether a user is logged in; the timer only runs then
        on_notice: called with the notice text after the logout
    """

    def __init__(
        self,
        logout: Callable[[], None],
        store: SessionStore,
        timeout: float = INACTIVITY_TIMEOUT,
        is_active: Optional[Callable[[], bool]] = None,
        on_notice: Optional[Callable[[str], None]] = None,
    ):
        self._logout = logout
        self._store = store
        self.timeout = timeout
        self._is_active = is_active or (lambda: bool(store.token))
        self._on_notice = on_notice or (lambda notice: store.set(LOGOUT_NOTICE_KEY, notice))
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self.last_activity: Optional[float] = None

    @property
    def is_armed(self) -> bool:
        return self._timer is not None and self._timer.is_alive()

    def record_activity(self) -> None:
        """Restart the countdown; cancels it when nobody is logged in."""
        with self._lock:
            self._cancel()
            self.last_activity = time.monotonic()
            if not self._is_active():
                return

            self._timer = threading.Timer(self.timeout, self._expire)
            self._timer.daemon = True
            self._timer.start()

    start = record_activity

    def stop(self) -> None:
        with self._lock:
            self._cancel()

    def seconds_remaining(self) -> Optional[float]:
        if not self.is_armed or self.last_activity is None:
            return None
        return max(0.0, self.timeout - (time.monotonic() - self.last_activity))

    def _cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _expire(self) -> None:
        with self._lock:
            self._timer = None

        logger.info(f"No activity for {self.timeout:.0f}s, logging out")
        try:
            self._logout()
        except Exception as e:
            logger.error(f"Auto-logout failed: {e}", exc_info=True)
            self._store.clear_auth()

        navigate_to(self._store, LOGIN_PATH)
        self._on_notice(INACTIVITY_NOTICE)


def consume_logout_notice(store: SessionStore) -> Optional[str]:
    """Pop the pending logout notice, if any."""
    notice = store.get(LOGOUT_NOTICE_KEY)
    if notice is not None:
        store.remove(LOGOUT_NOTICE_KEY)
    return notice
