from .session import (
    SessionStore,
    AUTH_TOKEN_KEY,
    USER_KEY,
    REFRESH_TOKEN_KEY,
    DARK_MODE_KEY,
    CHATBOT_LANGUAGE_KEY,
    NAV_PAGE_KEY,
    LOGOUT_NOTICE_KEY,
    get_dark_mode,
    set_dark_mode,
    get_chatbot_language,
    set_chatbot_language,
)

__all__ = [
    "SessionStore",
    "AUTH_TOKEN_KEY",
    "USER_KEY",
    "REFRESH_TOKEN_KEY",
    "DARK_MODE_KEY",
    "CHATBOT_LANGUAGE_KEY",
    "NAV_PAGE_KEY",
    "LOGOUT_NOTICE_KEY",
    "get_dark_mode",
    "set_dark_mode",
    "get_chatbot_language",
    "set_chatbot_language",
]
