"""
Navigation side effects triggered from outside the page layer.

The page shell reads ``nav_page`` from the session store on every rerun,
so setting it is how library code sends the user somewhere else.
"""
from typing import Callable, List, Optional

from medreserve.logging import get_logger
from medreserve.state import SessionStore, NAV_PAGE_KEY

logger = get_logger(__name__)

LOGIN_PATH = "/login"

# Extra hooks run after a forced redirect (e.g. st.rerun in the page shell)
_redirect_listeners: List[Callable[[str], None]] = []


def add_redirect_listener(listener: Callable[[str], None]) -> None:
    if listener not in _redirect_listeners:
        _redirect_listeners.append(listener)


def remove_redirect_listener(listener: Callable[[str], None]) -> None:
    if listener in _redirect_listeners:
        _redirect_listeners.remove(listener)


def navigate_to(store: SessionStore, path: str) -> None:
    store.set(NAV_PAGE_KEY, path)
    for listener in list(_redirect_listeners):
        try:
            listener(path)
        except Exception as e:
            logger.error(f"Error in redirect listener: {e}")


def redirect_to_login(store: SessionStore, reason: Optional[str] = None) -> None:
    """Clear the persisted session and force the login view."""
    store.clear_auth()
    if reason:
        logger.warning(f"Redirecting to login: {reason}")
    navigate_to(store, LOGIN_PATH)


def current_page(store: SessionStore) -> Optional[str]:
    return store.get(NAV_PAGE_KEY)
