"""Authentication endpoints"""
from typing import Any, Dict

from .base_api import ResourceAPI


class AuthAPI(ResourceAPI):
    prefix = "/auth"

    def login(self, credentials: Dict[str, str]) -> Dict[str, Any]:
        """
        POST /auth/login

        Backend returns: {accessToken, refreshToken, id, email, firstName, lastName, role}
        """
        return self._post("/login", credentials)

    def signup(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        """POST /auth/signup - returns a message, not tokens"""
        return self._post("/signup", user_data)

    def get_current_user(self) -> Dict[str, Any]:
        return self._get("/me")

    def logout(self) -> Dict[str, Any]:
        return self._post("/logout")
