"""
API Configuration Manager
Loads client settings from the environment and Streamlit secrets
"""
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

import streamlit as st

from medreserve.errors import ConfigurationError
from medreserve.logging import get_logger

logger = get_logger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:8080/api"

# Environment variable -> settings field
ENV_VARS = {
    "VITE_API_BASE_URL": "api_base_url",
    "VITE_ML_SERVICE_URL": "ml_service_url",
    "VITE_CHATBOT_SERVICE_URL": "chatbot_service_url",
    "VITE_WEBSOCKET_URL": "websocket_url",
    "VITE_ENABLE_REAL_TIME_UPDATES": "enable_real_time_updates",
}


@dataclass
class ClientSettings:
    """Configuration for the MedReserve client core"""
    api_base_url: str = DEFAULT_API_BASE_URL
    ml_service_url: Optional[str] = None
    chatbot_service_url: Optional[str] = None
    websocket_url: Optional[str] = None
    enable_real_time_updates: bool = False  # display only, polling always runs
    request_timeout: float = 10.0
    retry_base_delay: float = 5.0  # seconds, doubled every retry round
    max_retries: int = 3
    refresh_interval: float = 30.0
    inactivity_timeout: float = 300.0

    def __post_init__(self):
        self.api_base_url = _validate_url("api_base_url", self.api_base_url).rstrip("/")
        if isinstance(self.enable_real_time_updates, str):
            self.enable_real_time_updates = self.enable_real_time_updates.strip().lower() == "true"

    @property
    def ml_base_url(self) -> str:
        return (self.ml_service_url or self.api_base_url).rstrip("/")

    @property
    def chatbot_base_url(self) -> str:
        return (self.chatbot_service_url or self.api_base_url).rstrip("/")

    def integration_status(self) -> Dict[str, bool]:
        """Which auxiliary integrations are configured"""
        return {
            "ml_service": bool(self.ml_service_url),
            "chatbot_service": bool(self.chatbot_service_url),
            "websocket": bool(self.websocket_url),
            "real_time_updates": self.enable_real_time_updates,
        }


def _validate_url(key: str, value: str) -> str:
    parsed = urlparse(value or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(
            f"Invalid URL for {key}: {value!r}",
            config_key=key,
            expected_type="http(s) URL",
        )
    return value


def _settings_from_env(environ: Mapping[str, str]) -> Dict[str, Any]:
    values = {}
    for env_var, field_name in ENV_VARS.items():
        raw = environ.get(env_var)
        if raw:
            values[field_name] = raw
    return values


def _settings_from_secrets() -> Dict[str, Any]:
    """
    Read the [medreserve] table of Streamlit secrets.

    Expected secrets.toml format:
    [medreserve]
    api_base_url = "https://medreserve.example.com/api"
    ml_service_url = "https://ml.example.com"
    max_retries = 3
    """
    try:
        if hasattr(st, "secrets") and "medreserve" in st.secrets:
            known = {f.name for f in fields(ClientSettings)}
            return {k: v for k, v in dict(st.secrets["medreserve"]).items() if k in known}
    except Exception as e:
        # No secrets file configured
        logger.debug(f"Streamlit secrets unavailable: {e}")
    return {}


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    use_secrets: bool = True,
    **overrides,
) -> ClientSettings:
    """
    Build ClientSettings.

    Priority: explicit overrides > Streamlit secrets > VITE_* environment > defaults
    """
    values = _settings_from_env(os.environ if environ is None else environ)
    if use_secrets:
        values.update(_settings_from_secrets())
    values.update(overrides)

    settings = ClientSettings(**values)
    logger.info(
        f"Client settings loaded: api={settings.api_base_url} "
        f"integrations={settings.integration_status()}"
    )
    return settings
