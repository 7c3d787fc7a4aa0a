"""
Base class for the domain API modules
Each module maps one backend resource onto typed calls
"""
from typing import Any, Dict, Optional

from .http_client import HttpClient


class ResourceAPI:
    """Common plumbing for resource modules"""

    # Path prefix under the client's base URL, e.g. "/doctors"
    prefix: str = ""

    def __init__(self, client: HttpClient):
        self.client = client

    def _path(self, suffix: str = "") -> str:
        return f"{self.prefix}{suffix}"

    def _get(self, suffix: str = "", params: Optional[Dict[str, Any]] = None) -> Any:
        return self.client.get(self._path(suffix), params=params)

    def _post(self, suffix: str = "", payload: Optional[Any] = None) -> Any:
        return self.client.post(self._path(suffix), json=payload)

    def _put(self, suffix: str = "", payload: Optional[Any] = None) -> Any:
        return self.client.put(self._path(suffix), json=payload)


def unwrap_collection(payload: Any) -> Optional[list]:
    """
    Extract the record list from a backend response.

    Accepts a bare list, a Spring page ({"content": [...]}) or a
    {"data": [...]} envelope. Returns None when no collection is present.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("content", "data"):
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return None
