"""
Persisted session state for the MedReserve client.

The browser app kept these in localStorage; here they live in
``st.session_state`` by default, or in any mutable mapping handed in
(tests use a plain dict).
"""
import json
from typing import Any, MutableMapping, Optional

import streamlit as st
from streamlit.runtime.scriptrunner import get_script_run_ctx

from medreserve.logging import get_logger

logger = get_logger(__name__)

# Central registry of persisted keys.
AUTH_TOKEN_KEY = "authToken"
USER_KEY = "user"
REFRESH_TOKEN_KEY = "refreshToken"
DARK_MODE_KEY = "darkMode"
CHATBOT_LANGUAGE_KEY = "medreserve-chatbot-language"
NAV_PAGE_KEY = "nav_page"
LOGOUT_NOTICE_KEY = "logout_notice"

AUTH_KEYS = (AUTH_TOKEN_KEY, USER_KEY, REFRESH_TOKEN_KEY)

DEFAULT_CHATBOT_LANGUAGE = "en"


def _bound_session_state() -> MutableMapping[str, Any]:
    """State of the session running this script; worker threads have no script context."""
    ctx = get_script_run_ctx(suppress_warning=True)
    if ctx is None:
        return st.session_state
    return ctx.session_state


class SessionStore:
    """
    String-valued key/value store with JSON helpers.

    Without a backend it binds to the current Streamlit session when
    constructed, so it can be handed to background threads.
    """

    def __init__(self, backend: Optional[MutableMapping[str, Any]] = None):
        self._backend = backend if backend is not None else _bound_session_state()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        try:
            value = self._backend[key]
        except KeyError:
            value = None
        return default if value is None else value

    def set(self, key: str, value: str) -> None:
        self._backend[key] = value

    def remove(self, key: str) -> None:
        if key in self._backend:
            del self._backend[key]

    def get_json(self, key: str, default: Any = None) -> Any:
        """Decode a JSON value; raises ValueError on corrupt data."""
        raw = self.get(key)
        if raw is None or raw == "undefined":
            return default
        return json.loads(raw)

    def set_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value))

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    # -------------------------------------------------------------------------
    # Auth helpers
    # -------------------------------------------------------------------------

    @property
    def token(self) -> Optional[str]:
        return self.get(AUTH_TOKEN_KEY)

    def clear_auth(self) -> None:
        """Drop token, refresh token and user record."""
        for key in AUTH_KEYS:
            self.remove(key)
        logger.debug("Cleared persisted auth state")


# =============================================================================
# PREFERENCES
# =============================================================================

def get_dark_mode(store: SessionStore) -> bool:
    try:
        return bool(store.get_json(DARK_MODE_KEY, False))
    except ValueError:
        return False


def set_dark_mode(store: SessionStore, enabled: bool) -> None:
    store.set_json(DARK_MODE_KEY, bool(enabled))


def get_chatbot_language(store: SessionStore) -> str:
    return store.get(CHATBOT_LANGUAGE_KEY, DEFAULT_CHATBOT_LANGUAGE)


def set_chatbot_language(store: SessionStore, language: str) -> None:
    store.set(CHATBOT_LANGUAGE_KEY, language)
