"""
Session navigation and auto-logout.

Login/signup/logout transitions live in medreserve.services.AuthService.
"""

from .navigation import (
    LOGIN_PATH,
    add_redirect_listener,
    remove_redirect_listener,
    navigate_to,
    redirect_to_login,
    current_page,
)
from .auto_logout import (
    INACTIVITY_NOTICE,
    INACTIVITY_TIMEOUT,
    InactivityMonitor,
    consume_logout_notice,
)

__all__ = [
    "LOGIN_PATH",
    "add_redirect_listener",
    "remove_redirect_listener",
    "navigate_to",
    "redirect_to_login",
    "current_page",
    "INACTIVITY_NOTICE",
    "INACTIVITY_TIMEOUT",
    "InactivityMonitor",
    "consume_logout_notice",
]
