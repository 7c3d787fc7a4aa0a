"""Medical records and smart health feature endpoints"""
from typing import Any, Dict, Optional

from .base_api import ResourceAPI


class MedicalReportsAPI(ResourceAPI):
    prefix = "/medical-reports"

    def list_reports(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._get(params=params)


class PrescriptionsAPI(ResourceAPI):
    prefix = "/prescriptions"

    def list_prescriptions(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._get(params=params)


class SmartFeaturesAPI(ResourceAPI):
    prefix = "/smart-features"

    def health_tips(self) -> Any:
        return self._get("/health-tips")

    def wellness_score(self) -> Dict[str, Any]:
        return self._get("/wellness-score")

    def emergency_contacts(self) -> Any:
        return self._get("/emergency-contacts")
