"""Doctor directory endpoints"""
from typing import Any, Dict, List, Optional

from .base_api import ResourceAPI


class DoctorsAPI(ResourceAPI):
    prefix = "/doctors"

    def list_doctors(self, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET /doctors - paged response ({"content": [...]}) or a bare list"""
        return self._get(params=params)

    def get_doctor(self, doctor_id: int) -> Dict[str, Any]:
        return self._get(f"/{doctor_id}")

    def get_specialties(self) -> List[str]:
        return self._get("/specialties")

    def get_availability(self, doctor_id: int, date: str) -> List[str]:
        """
        GET /doctors/{id}/availability?date=YYYY-MM-DD

        Returns the free slot start times for that day.
        """
        return self._get(f"/{doctor_id}/availability", params={"date": date})
