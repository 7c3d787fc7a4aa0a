# =============================================================================
# medreserve/client.py
# MedReserveClient - wires settings, HTTP, data service and session together
# =============================================================================
"""
One MedReserveClient per page session. Nothing here is module-level state:
tests build their own instance with a fake HTTP session and a dict store.

Usage:
------
client = get_client()                       # cached in st.session_state
client.subscribe("doctors", on_doctors)
metrics = client.data.get_dashboard_metrics("patient")
"""

from __future__ import annotations
import time
from typing import Any, Callable, Optional

import requests
import streamlit as st

from medreserve.api import (
    AppointmentsAPI,
    AuthAPI,
    ChatbotAPI,
    ClientSettings,
    DashboardAPI,
    DoctorsAPI,
    HttpClient,
    MedicalReportsAPI,
    MLAPI,
    PrescriptionsAPI,
    SmartFeaturesAPI,
    load_settings,
)
from medreserve.auth import InactivityMonitor
from medreserve.diagnostics import APITester
from medreserve.logging import get_logger, setup_logging
from medreserve.offline import ConnectionManager
from medreserve.realtime import (
    RealTimeDataService,
    RetryPolicy,
    SubscriptionManager,
    SyntheticDataGenerator,
    build_default_strategies,
)
from medreserve.services import AuthService
from medreserve.state import SessionStore

logger = get_logger(__name__)

CLIENT_SESSION_KEY = "medreserve_client"


class MedReserveClient:
    """Container for every client-side component of one session."""

    def __init__(
        self,
        settings: ClientSettings,
        store: Optional[SessionStore] = None,
        session: Optional[requests.Session] = None,
        connection: Optional[ConnectionManager] = None,
        seed: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.store = store or SessionStore()

        # HTTP
        self.http = HttpClient(
            settings.api_base_url,
            self.store,
            timeout=settings.request_timeout,
            session=session,
        )
        self.ml_http = HttpClient(
            settings.ml_base_url,
            self.store,
            timeout=settings.request_timeout,
            session=self.http.session,
        )
        self.chatbot_http = HttpClient(
            settings.chatbot_base_url,
            self.store,
            timeout=settings.request_timeout,
            session=self.http.session,
        )

        # Resource modules
        self.auth = AuthAPI(self.http)
        self.doctors = DoctorsAPI(self.http)
        self.appointments = AppointmentsAPI(self.http)
        self.medical_reports = MedicalReportsAPI(self.http)
        self.prescriptions = PrescriptionsAPI(self.http)
        self.smart_features = SmartFeaturesAPI(self.http)
        self.dashboard = DashboardAPI(self.http)
        self.ml = MLAPI(self.ml_http)
        self.chatbot = ChatbotAPI(self.chatbot_http)

        # Real-time data
        self.connection = connection or ConnectionManager(settings.api_base_url)
        self.generator = SyntheticDataGenerator(seed)
        self.data = RealTimeDataService(
            build_default_strategies(self.http, self.generator),
            self.connection,
            RetryPolicy(base_delay=settings.retry_base_delay, max_retries=settings.max_retries),
            sleep=sleep,
        )
        self.subscriptions = SubscriptionManager(self.data)

        # Session
        self.auth_service = AuthService(self.auth, self.store)
        self.inactivity = InactivityMonitor(
            self.auth_service.logout,
            self.store,
            timeout=settings.inactivity_timeout,
            is_active=lambda: self.auth_service.is_authenticated,
        )

        logger.info(f"MedReserve client ready for {settings.api_base_url}")

    @classmethod
    def from_settings(cls, store: Optional[SessionStore] = None, **overrides) -> MedReserveClient:
        return cls(load_settings(**overrides), store=store)

    def subscribe(
        self,
        name: str,
        callback: Callable[[Any, Optional[BaseException]], None],
        interval: Optional[float] = None,
    ) -> None:
        self.subscriptions.subscribe(name, callback, interval or self.settings.refresh_interval)

    def unsubscribe(self, name: str, callback: Callable[[Any, Optional[BaseException]], None]) -> None:
        self.subscriptions.unsubscribe(name, callback)

    def api_tester(self, role: str = "patient") -> APITester:
        return APITester(self.http, self.data, chatbot=self.chatbot, role=role)

    def close(self) -> None:
        """Stop timers, the inactivity countdown and connection monitoring."""
        self.subscriptions.cleanup()
        self.inactivity.stop()
        self.connection.stop_monitoring()


def get_client() -> MedReserveClient:
    """The current Streamlit session's client, created on first use."""
    if CLIENT_SESSION_KEY not in st.session_state:
        setup_logging()
        st.session_state[CLIENT_SESSION_KEY] = MedReserveClient.from_settings()
    return st.session_state[CLIENT_SESSION_KEY]
