# =============================================================================
# medreserve/diagnostics/api_tester.py
# API Integration Tester - timed endpoint checks grouped by feature area
# =============================================================================
"""
APITester - checks that the backend answers the calls the pages depend on.

Each check is timed and marked required or optional. The overall status is
PASSED only when every required check passed.

Usage:
------
tester = APITester(client, service, chatbot=ChatbotAPI(chatbot_client))
report = tester.run_all_tests()
print(report["summary"]["status"])
"""

from __future__ import annotations
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from medreserve.api import (
    AuthAPI,
    ChatbotAPI,
    DashboardAPI,
    DoctorsAPI,
    HttpClient,
)
from medreserve.errors import ApiRequestError
from medreserve.realtime import (
    APPOINTMENTS,
    DOCTORS,
    MEDICAL_REPORTS,
    PRESCRIPTIONS,
    RealTimeDataService,
)
from medreserve.services import BaseService, ServiceResult

CATEGORIES = (
    "authentication",
    "dashboard",
    "doctors",
    "appointments",
    "prescriptions",
    "reports",
    "chatbot",
)

PROBE_CREDENTIALS = {"email": "test@example.com", "password": "test123"}
PROBE_CHAT_MESSAGE = "Hello, I need help"


@dataclass
class EndpointCheck:
    name: str
    call: Callable[[], Any]
    required: bool = True


def _ignore_unauthorized(store) -> None:
    """Probe calls must not end the user's session."""


class APITester(BaseService):
    """Runs the endpoint checks and builds the report."""

    def __init__(
        self,
        client: HttpClient,
        service: RealTimeDataService,
        chatbot: Optional[ChatbotAPI] = None,
        role: str = "patient",
    ):
        super().__init__()
        self.client = client
        self.service = service
        self.chatbot = chatbot
        self.role = role

        self.checks: Dict[str, List[EndpointCheck]] = {category: [] for category in CATEGORIES}
        self.results: Dict[str, Dict[str, Any]] = {}
        self._register_default_checks()

    # =========================================================================
    # CHECK REGISTRY
    # =========================================================================

    def add_check(self, category: str, name: str, call: Callable[[], Any], required: bool = True) -> None:
        self.checks.setdefault(category, []).append(EndpointCheck(name, call, required))

    def _register_default_checks(self) -> None:
        probe = HttpClient(
            self.client.base_url,
            self.client.store,
            timeout=self.client.timeout,
            on_unauthorized=_ignore_unauthorized,
            session=self.client.session,
        )
        auth_api = AuthAPI(probe)
        doctors_api = DoctorsAPI(probe)
        dashboard_api = DashboardAPI(probe)

        # a 401 for the fake credentials is expected
        self.add_check("authentication", "Login API", lambda: auth_api.login(PROBE_CREDENTIALS), required=False)
        if self.client.store.token:
            self.add_check("authentication", "Token Validation", auth_api.get_current_user)

        self.add_check("dashboard", "Dashboard Metrics", lambda: self.service.get_dashboard_metrics(self.role))
        self.add_check("dashboard", "Role Metrics API", lambda: dashboard_api.get_metrics(self.role), required=False)

        self.add_check("doctors", "Doctors List", lambda: self.service.fetch(DOCTORS))
        self.add_check("doctors", "Doctor Specialties", doctors_api.get_specialties, required=False)

        self.add_check("appointments", "Appointments List", lambda: self.service.fetch(APPOINTMENTS))
        self.add_check("prescriptions", "Prescriptions List", lambda: self.service.fetch(PRESCRIPTIONS))
        self.add_check("reports", "Medical Reports List", lambda: self.service.fetch(MEDICAL_REPORTS))

        if self.chatbot is not None:
            chatbot = self.chatbot
            self.add_check("chatbot", "Chatbot Message", lambda: chatbot.send_message(PROBE_CHAT_MESSAGE), required=False)
            self.add_check("chatbot", "Chatbot Intents", chatbot.get_intents, required=False)

    # =========================================================================
    # RUNNING
    # =========================================================================

    def test_endpoint(self, name: str, call: Callable[[], Any], required: bool = True) -> ServiceResult:
        """Time one call; failures are captured, never raised."""
        start = time.perf_counter()
        metadata: Dict[str, Any] = {"name": name, "required": required}

        try:
            data = call()
        except Exception as e:
            metadata["response_time"] = round((time.perf_counter() - start) * 1000)
            metadata["status"] = (
                e.status_code if isinstance(e, ApiRequestError) and e.status_code else "network_error"
            )
            self.logger.warning(f"{name} failed: {e}")
            return ServiceResult.from_exception(e, metadata=metadata)

        metadata["response_time"] = round((time.perf_counter() - start) * 1000)
        metadata["status"] = "success"
        metadata["data"] = "Data received" if data else "No data"
        return ServiceResult.ok(data, metadata=metadata)

    def run_category(self, category: str) -> Dict[str, Any]:
        tests = []
        for check in self.checks.get(category, []):
            result = self.test_endpoint(check.name, check.call, check.required)
            entry = {**result.metadata, "passed": result.success}
            if not result.success:
                entry["error"] = result.error
            tests.append(entry)

        passed = sum(1 for t in tests if t["passed"])
        if not tests:
            status = "skipped"
        elif passed == len(tests):
            status = "passed"
        elif passed:
            status = "partial"
        else:
            status = "failed"

        self.results[category] = {"status": status, "tests": tests}
        return self.results[category]

    def run_all_tests(self) -> Dict[str, Any]:
        self.logger.info("Starting MedReserve API integration tests...")
        self.results = {}

        categories = list(self.checks)
        for index, category in enumerate(categories):
            self._update_progress(int(index / len(categories) * 100), f"Testing {category}")
            self.run_category(category)
        self._update_progress(100, "Done")

        return self.generate_report()

    # =========================================================================
    # REPORT
    # =========================================================================

    def generate_report(self) -> Dict[str, Any]:
        total = passed = required = passed_required = 0

        for category, result in self.results.items():
            self.logger.info(f"{category.upper()}: {result['status'].upper()}")
            for test in result["tests"]:
                mark = "PASS" if test["passed"] else "FAIL"
                kind = "REQUIRED" if test["required"] else "OPTIONAL"
                self.logger.info(f"  {mark} {test['name']} [{kind}] ({test['response_time']}ms)")

                total += 1
                passed += test["passed"]
                if test["required"]:
                    required += 1
                    passed_required += test["passed"]

        status = "PASSED" if passed_required == required else "FAILED"
        self.logger.info(
            f"Total: {passed}/{total}, required: {passed_required}/{required}, overall: {status}"
        )

        return {
            "summary": {
                "total": total,
                "passed": passed,
                "required": required,
                "passedRequired": passed_required,
                "status": status,
            },
            "details": self.results,
        }
