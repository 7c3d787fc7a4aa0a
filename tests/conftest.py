# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import json
import time
from datetime import datetime, timedelta
from typing import Any, List, Optional
from unittest.mock import MagicMock, patch

import pytest
import requests

from medreserve.api import HttpClient
from medreserve.errors import ApiRequestError
from medreserve.offline import ConnectionManager
from medreserve.realtime import (
    RealTimeDataService,
    ResourceStrategy,
    RetryPolicy,
    SyntheticDataGenerator,
)
from medreserve.state import SessionStore

API_BASE_URL = "http://api.test/api"


# =============================================================================
# HELPERS
# =============================================================================

def make_response(status_code: int = 200, body: Any = None) -> requests.Response:
    """Build a real requests.Response with a JSON body"""
    response = requests.Response()
    response.status_code = status_code
    response.encoding = "utf-8"
    response._content = b"" if body is None else json.dumps(body).encode("utf-8")
    response.headers["Content-Type"] = "application/json"
    return response


class RecordingSleep:
    """Stand-in for time.sleep that only records the requested delays"""

    def __init__(self):
        self.delays: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class Candidate:
    """
    Scripted fetch candidate.

    Each call consumes the next outcome: exceptions are raised, anything
    else is returned. The last outcome repeats once the script runs out.
    """

    def __init__(self, *outcomes: Any):
        self.outcomes = list(outcomes)
        self.calls = 0

    def __call__(self) -> Any:
        index = min(self.calls, len(self.outcomes) - 1)
        self.calls += 1
        outcome = self.outcomes[index]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def server_error(status_code: int = 500) -> ApiRequestError:
    return ApiRequestError(f"HTTP {status_code}", status_code=status_code)


# =============================================================================
# CORE FIXTURES
# =============================================================================

@pytest.fixture
def store():
    """Session store over a plain dict"""
    return SessionStore({})


@pytest.fixture
def generator():
    """Seeded synthetic data generator"""
    return SyntheticDataGenerator(seed=42)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def fake_session():
    """requests.Session double; tests script session.request"""
    session = MagicMock()
    session.headers = {}
    return session


@pytest.fixture
def http_client(store, fake_session):
    return HttpClient(API_BASE_URL, store, session=fake_session)


@pytest.fixture
def connection():
    return ConnectionManager(online=True)


@pytest.fixture
def retry_policy():
    return RetryPolicy(base_delay=5.0, max_retries=3)


@pytest.fixture
def make_service(connection, retry_policy, recording_sleep):
    """Factory building a RealTimeDataService over the given strategies"""

    def _make(*strategies: ResourceStrategy) -> RealTimeDataService:
        return RealTimeDataService(
            {strategy.name: strategy for strategy in strategies},
            connection,
            retry_policy,
            sleep=recording_sleep,
        )

    return _make


@pytest.fixture
def fixed_now():
    return datetime(2025, 1, 15, 9, 0, 0)


@pytest.fixture
def future_and_past_appointments(fixed_now):
    """Two upcoming appointments and one in the past"""
    return [
        {"id": 1, "appointmentDateTime": (fixed_now + timedelta(days=1)).isoformat()},
        {"id": 2, "appointmentDateTime": (fixed_now + timedelta(days=7)).isoformat()},
        {"id": 3, "appointmentDateTime": (fixed_now - timedelta(days=3)).isoformat()},
    ]


@pytest.fixture
def kolkata_time(monkeypatch):
    """Run with the host clock in Asia/Kolkata (UTC+05:30)"""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "Asia/Kolkata")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


# =============================================================================
# MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_streamlit():
    """Mock the Streamlit calls made by the package"""
    mock_st = MagicMock()
    mock_st.session_state = {}
    mock_st.secrets = {}

    targets = [
        "medreserve.errors.handlers.st",
        "medreserve.state.session.st",
        "medreserve.api.config_manager.st",
        "medreserve.client.st",
    ]
    patchers = [patch(target, mock_st) for target in targets]
    for patcher in patchers:
        patcher.start()

    yield mock_st

    for patcher in patchers:
        patcher.stop()
