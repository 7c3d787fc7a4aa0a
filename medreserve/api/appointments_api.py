"""Appointment booking endpoints (write paths propagate errors)"""
from typing import Any, Dict, Optional

from .base_api import ResourceAPI


class AppointmentsAPI(ResourceAPI):
    prefix = "/appointments"

    def book(self, appointment: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST /appointments/book

        Args:
            appointment: {doctorId, appointmentDateTime, appointmentType,
                durationMinutes, chiefComplaint?, symptoms?}
        """
        return self._post("/book", appointment)

    def my_appointments(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._get("/my-appointments", params=params)

    def get_appointment(self, appointment_id: int) -> Dict[str, Any]:
        return self._get(f"/{appointment_id}")

    def reschedule(self, appointment_id: int, new_date_time: str) -> Dict[str, Any]:
        return self._put(f"/{appointment_id}/reschedule", {"newDateTime": new_date_time})

    def cancel(self, appointment_id: int, reason: Optional[str] = None) -> Dict[str, Any]:
        return self._put(f"/{appointment_id}/cancel", {"reason": reason})
