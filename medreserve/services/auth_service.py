# =============================================================================
# medreserve/services/auth_service.py
# Auth/Session Context - login, signup, logout over the session store
# =============================================================================
"""
AuthService - the session owner for page code.

Token and user record live in the SessionStore, so a 401 caught by the
HttpClient (which clears the store) is reflected here immediately.

Usage:
------
auth = AuthService(AuthAPI(client), store)
auth.initialize()
user = auth.login({"email": "...", "password": "..."})
if auth.is_authenticated:
    ...
auth.logout()
"""

from __future__ import annotations
from typing import Any, Dict, Optional

from medreserve.api import AuthAPI
from medreserve.errors import MalformedPayloadError, MedReserveError
from medreserve.state import (
    AUTH_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    USER_KEY,
    SessionStore,
)
from .base_service import BaseService

# Fields of the login response copied into the persisted user record
USER_FIELDS = ("id", "email", "firstName", "lastName", "role")


class AuthService(BaseService):
    """Login state and transitions for the current session."""

    def __init__(self, auth_api: AuthAPI, store: SessionStore):
        super().__init__()
        self.auth_api = auth_api
        self.store = store

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def token(self) -> Optional[str]:
        return self.store.token

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        try:
            return self.store.get_json(USER_KEY)
        except ValueError:
            return None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and bool(self.user)

    def initialize(self) -> Optional[Dict[str, Any]]:
        """
        Restore a persisted session.

        A user record that does not decode clears token and user.
        """
        if not self.token or USER_KEY not in self.store:
            return None

        try:
            user = self.store.get_json(USER_KEY)
        except ValueError as e:
            self.logger.error(f"Error parsing stored user data: {e}")
            self.store.remove(AUTH_TOKEN_KEY)
            self.store.remove(USER_KEY)
            return None

        if user:
            self.logger.info(f"Restored session for user {user.get('id')}")
        return user

    def verify_session(self) -> bool:
        """
        Refresh the user record from /auth/me.

        Failures are logged and leave the session untouched.
        """
        if not self.token:
            return False
        try:
            response = self.auth_api.get_current_user()
        except MedReserveError as e:
            self.logger.warning(f"Token verification failed: {e}")
            return False

        if isinstance(response, dict) and response.get("user"):
            self.store.set_json(USER_KEY, response["user"])
        return True

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def login(self, credentials: Dict[str, str]) -> Dict[str, Any]:
        """
        Authenticate and persist token, user and refresh token.

        Raises:
            MalformedPayloadError: when the response carries no accessToken
            ApiRequestError / NetworkError: propagated from the backend call
        """
        with self.log_operation("Login"):
            response = self.auth_api.login(credentials)

            if not isinstance(response, dict) or not response.get("accessToken"):
                raise MalformedPayloadError(
                    "Invalid response format",
                    source="/auth/login",
                    expected="accessToken",
                )

            user = {key: response.get(key) for key in USER_FIELDS}
            self.store.set(AUTH_TOKEN_KEY, response["accessToken"])
            self.store.set_json(USER_KEY, user)
            if response.get("refreshToken"):
                self.store.set(REFRESH_TOKEN_KEY, response["refreshToken"])

            self.logger.info(f"Login successful: user={user['id']} role={user['role']}")
            return user

    def signup(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Register a new account. Does not log in.

        Raises:
            MalformedPayloadError: when the response has neither success nor message
        """
        with self.log_operation("Signup"):
            response = self.auth_api.signup(user_data)

            if not isinstance(response, dict) or not (response.get("success") or response.get("message")):
                raise MalformedPayloadError(
                    "Invalid response format",
                    source="/auth/signup",
                    expected="success or message",
                )
            return response

    def logout(self) -> None:
        """Best-effort backend logout, then drop the local session."""
        if self.token:
            try:
                self.auth_api.logout()
            except MedReserveError as e:
                self.logger.warning(f"Logout API call failed: {e}")

        self.store.clear_auth()
        self.logger.info("Logged out")

    def update_user(self, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Merge ``changes`` into the stored user; no-op when logged out."""
        user = self.user
        if not user:
            return None

        updated = {**user, **changes}
        self.store.set_json(USER_KEY, updated)
        return updated
