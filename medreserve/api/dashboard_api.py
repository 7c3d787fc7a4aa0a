"""Role dashboards computed by the backend"""
from typing import Any, Dict

from .base_api import ResourceAPI

ROLES = ("patient", "doctor", "admin")


class DashboardAPI(ResourceAPI):
    prefix = "/dashboard"

    def get_metrics(self, role: str = "patient") -> Dict[str, Any]:
        """GET /dashboard/{role}-metrics"""
        if role not in ROLES:
            raise ValueError(f"Unknown dashboard role: {role}")
        return self._get(f"/{role}-metrics")
