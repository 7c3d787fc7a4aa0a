"""
HTTP client wrapper for the MedReserve REST backend
Attaches the bearer token and reacts to expired sessions
"""
from typing import Any, Callable, Dict, Optional

import requests

from medreserve.auth.navigation import redirect_to_login
from medreserve.errors import (
    ApiRequestError,
    AuthenticationError,
    NetworkError,
)
from medreserve.logging import get_logger
from medreserve.state import SessionStore

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 10


def _backend_message(response: requests.Response) -> Optional[str]:
    """Pull the error text out of a backend error body, if any"""
    try:
        body = response.json()
    except ValueError:
        return None

    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return None


def _parse_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpClient:
    """
    Thin wrapper around requests.Session.

    Usage:
        client = HttpClient("http://localhost:8080/api", SessionStore())
        doctors = client.get("/doctors", params={"page": 0})
    """

    def __init__(
        self,
        base_url: str,
        store: SessionStore,
        timeout: float = DEFAULT_TIMEOUT,
        on_unauthorized: Optional[Callable[[SessionStore], None]] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.store = store
        self.timeout = timeout
        self.on_unauthorized = on_unauthorized or (
            lambda s: redirect_to_login(s, reason="401 Unauthorized")
        )
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def _auth_headers(self) -> Dict[str, str]:
        token = self.store.token
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    def _url(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return self.base_url + path

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Any:
        """
        Issue an authenticated request and return the decoded body.

        Raises:
            AuthenticationError: on 401, after clearing the session
            NetworkError: on timeout or connection failure
            ApiRequestError: on any other non-2xx status
        """
        url = self._url(path)
        headers = self._auth_headers()
        if not headers:
            logger.debug(f"{method} {url} without token")

        response = self._send(method, url, params=params, json=json, headers=headers)

        if response.status_code == 401:
            logger.error("401 Unauthorized - token may be expired or invalid")
            self.on_unauthorized(self.store)
            raise AuthenticationError(url=url, backend_message=_backend_message(response))

        if response.status_code == 403:
            logger.error(f"403 Forbidden for {url}")

        return self._decode(response, url)

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Optional[Any] = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Optional[Any] = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def fetch_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Unauthenticated GET against an absolute URL"""
        response = self._send("GET", url, params=params)
        return self._decode(response, url)

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self.session.request(
                method=method,
                url=url,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.exceptions.Timeout as e:
            raise NetworkError(
                "Connection timeout. The server may be starting up, please try again in a moment.",
                url=url,
                timeout=self.timeout,
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(
                f"Connection error. Please check your network connection. ({e})",
                url=url,
            ) from e

    def _decode(self, response: requests.Response, url: str) -> Any:
        if not response.ok:
            message = _backend_message(response)
            raise ApiRequestError(
                f"HTTP {response.status_code}",
                status_code=response.status_code,
                url=url,
                backend_message=message,
            )
        return _parse_body(response)
