"""
REST API Module
HTTP wrapper, configuration and one module per backend resource
"""

from .config_manager import ClientSettings, load_settings
from .http_client import HttpClient
from .base_api import ResourceAPI, unwrap_collection

from .auth_api import AuthAPI
from .doctors_api import DoctorsAPI
from .appointments_api import AppointmentsAPI
from .health_api import (
    MedicalReportsAPI,
    PrescriptionsAPI,
    SmartFeaturesAPI,
)
from .dashboard_api import DashboardAPI
from .ml_api import MLAPI, ChatbotAPI

__all__ = [
    # Plumbing
    "ClientSettings",
    "load_settings",
    "HttpClient",
    "ResourceAPI",
    "unwrap_collection",

    # Resource modules
    "AuthAPI",
    "DoctorsAPI",
    "AppointmentsAPI",
    "MedicalReportsAPI",
    "PrescriptionsAPI",
    "SmartFeaturesAPI",
    "DashboardAPI",
    "MLAPI",
    "ChatbotAPI",
]
