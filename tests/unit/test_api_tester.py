# =============================================================================
# tests/unit/test_api_tester.py
# Unit Tests for APITester
# =============================================================================

from unittest.mock import MagicMock

import pytest
import requests

from conftest import make_response
from medreserve.api import ChatbotAPI
from medreserve.diagnostics import APITester
from medreserve.realtime import DOCTORS
from medreserve.state import AUTH_TOKEN_KEY, NAV_PAGE_KEY


@pytest.fixture
def service():
    service = MagicMock()
    service.fetch.return_value = [{"id": 1}]
    service.get_dashboard_metrics.return_value = {"totalDoctors": 1}
    return service


class TestReport:

    def test_all_checks_pass(self, http_client, fake_session, service):
        fake_session.request.return_value = make_response(200, {"ok": True})

        report = APITester(http_client, service).run_all_tests()

        assert report["summary"] == {
            "total": 8,
            "passed": 8,
            "required": 5,
            "passedRequired": 5,
            "status": "PASSED",
        }
        assert report["details"]["doctors"]["status"] == "passed"
        assert report["details"]["chatbot"]["status"] == "skipped"

    def test_optional_failures_still_pass(self, http_client, fake_session, service):
        fake_session.request.return_value = make_response(500)

        report = APITester(http_client, service).run_all_tests()

        assert report["summary"]["status"] == "PASSED"
        assert report["summary"]["passed"] == 5
        assert report["details"]["doctors"]["status"] == "partial"
        specialties = report["details"]["doctors"]["tests"][1]
        assert specialties["name"] == "Doctor Specialties"
        assert specialties["status"] == 500
        assert specialties["passed"] is False

    def test_required_failure_fails_report(self, http_client, fake_session, service):
        fake_session.request.return_value = make_response(200, [])

        def fetch(name):
            if name == DOCTORS:
                raise RuntimeError("doctors broke")
            return [{"id": 1}]

        service.fetch.side_effect = fetch

        report = APITester(http_client, service).run_all_tests()

        assert report["summary"]["status"] == "FAILED"
        assert report["summary"]["passedRequired"] == 4
        failed = report["details"]["doctors"]["tests"][0]
        assert failed["error"] == "doctors broke"
        assert failed["status"] == "network_error"

    def test_probe_401_keeps_session(self, http_client, fake_session, store, service):
        store.set(AUTH_TOKEN_KEY, "t")
        fake_session.request.return_value = make_response(401)

        report = APITester(http_client, service).run_all_tests()

        auth_tests = report["details"]["authentication"]["tests"]
        assert [t["name"] for t in auth_tests] == ["Login API", "Token Validation"]
        assert report["summary"]["status"] == "FAILED"
        assert store.token == "t"
        assert store.get(NAV_PAGE_KEY) is None

    def test_chatbot_checks(self, http_client, fake_session, service):
        fake_session.request.return_value = make_response(200, {"response": "Hi"})

        report = APITester(http_client, service, chatbot=ChatbotAPI(http_client)).run_all_tests()

        assert report["details"]["chatbot"]["status"] == "passed"
        assert report["summary"]["total"] == 10


class TestEndpoint:

    def test_success_metadata(self, http_client, service):
        tester = APITester(http_client, service)

        result = tester.test_endpoint("Echo", lambda: [1], required=False)

        assert result.success
        assert result.metadata["name"] == "Echo"
        assert result.metadata["required"] is False
        assert result.metadata["status"] == "success"
        assert result.metadata["data"] == "Data received"
        assert result.metadata["response_time"] >= 0

    def test_network_failure_status(self, http_client, fake_session, service):
        fake_session.request.side_effect = requests.exceptions.ConnectionError("refused")
        tester = APITester(http_client, service)

        result = tester.test_endpoint("Doctors", lambda: http_client.get("/doctors"))

        assert not result.success
        assert result.metadata["status"] == "network_error"
        assert result.error_code == "API_002"

    def test_custom_check_and_progress(self, http_client, fake_session, service):
        fake_session.request.return_value = make_response(200, [])
        tester = APITester(http_client, service)
        tester.add_check("ml", "ML Specialties", lambda: ["Cardiology"])
        progress = []
        tester.set_progress_callback(lambda pct, msg: progress.append(pct))

        report = tester.run_all_tests()

        assert report["details"]["ml"]["status"] == "passed"
        assert progress[0] == 0
        assert progress[-1] == 100
