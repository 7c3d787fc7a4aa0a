# =============================================================================
# tests/integration/test_client_wiring.py
# Integration Tests: MedReserveClient end to end with a fake HTTP session
# =============================================================================

import pytest

from conftest import make_response
from medreserve.api import ClientSettings
from medreserve.client import MedReserveClient, get_client
from medreserve.realtime import DASHBOARD_METRICS, DOCTORS
from medreserve.state import REFRESH_TOKEN_KEY, SessionStore


@pytest.fixture
def settings():
    return ClientSettings(
        api_base_url="http://api.test/api",
        chatbot_service_url="http://bot.test",
        retry_base_delay=0.0,
        max_retries=1,
    )


@pytest.fixture
def client(settings, store, fake_session, recording_sleep):
    client = MedReserveClient(settings, store=store, session=fake_session, seed=42, sleep=recording_sleep)
    yield client
    client.close()


def route(responses):
    """session.request side effect answering by URL suffix"""

    def _request(method, url, **kwargs):
        for suffix, response in responses.items():
            if url.endswith(suffix):
                return response
        return make_response(404)

    return _request


class TestClientFlow:

    def test_login_then_authenticated_fetch(self, client, fake_session, store):
        fake_session.request.side_effect = route({
            "/auth/login": make_response(200, {
                "accessToken": "tok",
                "refreshToken": "ref",
                "id": 1,
                "email": "pat@example.com",
                "firstName": "Pat",
                "lastName": "Lee",
                "role": "PATIENT",
            }),
            "/doctors": make_response(200, {"content": [
                {"id": 1, "user": {"firstName": "Sarah", "lastName": "Johnson"}, "specialty": "Cardiology"},
            ]}),
        })

        client.auth_service.login({"email": "pat@example.com", "password": "pw"})
        doctors = client.data.fetch(DOCTORS)

        assert client.auth_service.is_authenticated
        assert store.get(REFRESH_TOKEN_KEY) == "ref"
        assert doctors[0]["name"] == "Dr. Sarah Johnson"
        headers = fake_session.request.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer tok"

    def test_chatbot_uses_its_own_base_url(self, client, fake_session):
        fake_session.request.return_value = make_response(200, {"response": "Hi"})

        client.chatbot.send_message("Hello")

        assert fake_session.request.call_args.kwargs["url"] == "http://bot.test/chatbot/chat"

    def test_ml_falls_back_to_api_base_url(self, client, fake_session):
        fake_session.request.return_value = make_response(200, ["Cardiology"])

        client.ml.get_specialties()

        assert fake_session.request.call_args.kwargs["url"] == "http://api.test/api/ml/specialties"

    def test_retry_settings_applied(self, client, fake_session, recording_sleep):
        fake_session.request.return_value = make_response(500)

        doctors = client.data.fetch(DOCTORS)

        assert len(doctors) == 60
        assert fake_session.request.call_count == 6
        assert recording_sleep.delays == [0.0]

    def test_seeded_fallback_is_reproducible(self, settings, fake_session, recording_sleep):
        fake_session.request.return_value = make_response(500)
        first = MedReserveClient(settings, store=SessionStore({}), session=fake_session, seed=3, sleep=recording_sleep)
        second = MedReserveClient(settings, store=SessionStore({}), session=fake_session, seed=3, sleep=recording_sleep)

        try:
            assert first.data.fetch(DOCTORS) == second.data.fetch(DOCTORS)
        finally:
            first.close()
            second.close()

    def test_dashboard_metrics_through_client(self, client, fake_session):
        fake_session.request.side_effect = route({
            "/doctors": make_response(200, [{"id": 1, "isAvailable": True}, {"id": 2, "isAvailable": False}]),
            "/appointments/my-appointments": make_response(200, []),
        })

        metrics = client.data.fetch(DASHBOARD_METRICS)

        assert metrics["totalDoctors"] == 2
        assert metrics["availableDoctors"] == 1
        # empty appointments are replaced by the two demo appointments
        assert metrics["totalAppointments"] == 2

    def test_subscribe_uses_settings_interval(self, client, fake_session):
        fake_session.request.return_value = make_response(200, [])
        client.data.fetch(DOCTORS)

        client.subscribe(DOCTORS, lambda data, error: None)

        assert client.subscriptions._timers[DOCTORS].interval == 30.0

    def test_api_tester_report(self, client, fake_session):
        fake_session.request.return_value = make_response(200, [{"id": 1}])

        report = client.api_tester().run_all_tests()

        assert report["summary"]["status"] == "PASSED"


class TestSessionClient:

    def test_get_client_cached_per_session(self, mock_streamlit, monkeypatch):
        monkeypatch.delenv("VITE_API_BASE_URL", raising=False)

        first = get_client()
        second = get_client()

        try:
            assert first is second
            assert first.settings.api_base_url == "http://localhost:8080/api"
        finally:
            first.close()
