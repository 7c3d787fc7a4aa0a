"""
Backend-to-frontend shape transforms for the real-time resources.

Field names follow the backend contract (camelCase) on both sides so the
page layer can keep consuming the same dictionaries.
"""
import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pandas as pd

from medreserve.realtime.synthetic import (
    SyntheticDataGenerator,
    format_date,
    format_time,
)

DEFAULT_LOCATION = "MedReserve Clinic"
DEFAULT_BIOGRAPHY = "Experienced healthcare professional dedicated to providing quality care."
DEFAULT_EMAIL = "doctor@medreserve.com"
DEFAULT_PHONE = "+1 (555) 123-4567"
DEFAULT_PRESCRIPTION_DAYS = 30


def to_local_naive(value: datetime) -> datetime:
    """Zone-aware datetimes become local wall-clock time; naive ones are already local."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a backend timestamp into a naive local datetime, or None."""
    if value in (None, ""):
        return None
    stamp = pd.to_datetime(value, errors="coerce")
    if pd.isna(stamp):
        return None
    return to_local_naive(stamp.to_pydatetime())


def _nested(record: Dict[str, Any], *path: str) -> Any:
    value: Any = record
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def doctor_display_name(first: Any, last: Any) -> str:
    return f"Dr. {first or 'Unknown'} {last or 'Doctor'}"


def _related_doctor_name(record: Dict[str, Any]) -> str:
    """Name of the doctor attached to an appointment/report/prescription"""
    if record.get("doctorName"):
        return record["doctorName"]
    first = _nested(record, "doctor", "user", "firstName") or _nested(record, "doctor", "firstName")
    last = _nested(record, "doctor", "user", "lastName") or _nested(record, "doctor", "lastName")
    return doctor_display_name(first, last)


# =============================================================================
# DOCTORS
# =============================================================================

def transform_doctor(doctor: Dict[str, Any], generator: SyntheticDataGenerator) -> Dict[str, Any]:
    first = _nested(doctor, "user", "firstName") or doctor.get("firstName")
    last = _nested(doctor, "user", "lastName") or doctor.get("lastName")
    is_available = doctor.get("isAvailable") is not False

    return {
        "id": doctor.get("id"),
        "name": doctor_display_name(first, last),
        "specialty": doctor.get("specialty") or "General Medicine",
        "experience": doctor.get("yearsOfExperience") or generator.experience(),
        "rating": doctor.get("averageRating") or generator.rating(),
        "reviews": doctor.get("totalReviews") or generator.reviews(),
        "location": doctor.get("clinicAddress") or doctor.get("hospitalAffiliation") or DEFAULT_LOCATION,
        "availability": "Available Today" if is_available else "Not Available",
        "consultationFee": doctor.get("consultationFee") or generator.consultation_fee(),
        "image": doctor.get("profileImage") or None,
        "isAvailable": is_available,
        "qualification": doctor.get("qualification") or "MD",
        "biography": doctor.get("biography") or DEFAULT_BIOGRAPHY,
        "phone": _nested(doctor, "user", "phoneNumber") or DEFAULT_PHONE,
        "email": _nested(doctor, "user", "email") or DEFAULT_EMAIL,
    }


def transform_doctors(doctors: List[Dict[str, Any]], generator: SyntheticDataGenerator) -> List[Dict[str, Any]]:
    return [transform_doctor(doctor, generator) for doctor in doctors]


# =============================================================================
# APPOINTMENTS
# =============================================================================

def transform_appointment(appointment: Dict[str, Any]) -> Dict[str, Any]:
    when = parse_datetime(appointment.get("appointmentDateTime"))

    return {
        "id": appointment.get("id"),
        "doctorName": _related_doctor_name(appointment),
        "specialty": _nested(appointment, "doctor", "specialty") or appointment.get("specialty") or "General Medicine",
        "appointmentDateTime": when.isoformat() if when else None,
        "date": format_date(when) if when else "TBD",
        "time": format_time(when) if when else "TBD",
        "status": appointment.get("status") or "SCHEDULED",
        "type": appointment.get("appointmentType") or appointment.get("type") or "CONSULTATION",
        "location": (
            appointment.get("location")
            or _nested(appointment, "doctor", "clinicAddress")
            or DEFAULT_LOCATION
        ),
        "notes": (
            appointment.get("chiefComplaint")
            or appointment.get("symptoms")
            or appointment.get("notes")
            or "Regular consultation"
        ),
    }


def transform_appointments(appointments: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [transform_appointment(appointment) for appointment in appointments]


# =============================================================================
# MEDICAL REPORTS
# =============================================================================

def transform_medical_report(report: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    created = parse_datetime(report.get("createdAt")) or now or datetime.now()

    return {
        "id": report.get("id"),
        "title": report.get("title") or report.get("reportType") or "Medical Report",
        "type": report.get("reportType") or report.get("category") or "Lab Report",
        "date": format_date(created),
        "doctor": _related_doctor_name(report),
        "status": report.get("status") or "Reviewed",
        "description": report.get("description") or report.get("notes") or "Medical report",
        "fileUrl": report.get("fileUrl") or report.get("filePath") or "#",
    }


def transform_medical_reports(reports: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [transform_medical_report(report) for report in reports]


# =============================================================================
# PRESCRIPTIONS
# =============================================================================

def _ceil_days(delta: timedelta) -> int:
    return math.ceil(delta.total_seconds() / 86400)


def transform_prescription(prescription: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now()
    start = (
        parse_datetime(prescription.get("startDate"))
        or parse_datetime(prescription.get("createdAt"))
        or now
    )
    end = parse_datetime(prescription.get("endDate")) or start + timedelta(days=DEFAULT_PRESCRIPTION_DAYS)

    total_days = _ceil_days(end - start)
    remaining_days = max(0, _ceil_days(end - now))

    return {
        "id": prescription.get("id"),
        "name": prescription.get("medicationName") or prescription.get("medicine") or "Unknown Medicine",
        "dosage": prescription.get("dosage") or "1 tablet",
        "frequency": prescription.get("frequency") or prescription.get("instructions") or "As needed",
        "prescribedBy": _related_doctor_name(prescription),
        "startDate": format_date(start),
        "endDate": format_date(end),
        "status": "Active" if remaining_days > 0 else "Completed",
        "instructions": prescription.get("instructions") or prescription.get("notes") or "Take as prescribed",
        "remainingDays": remaining_days,
        "totalDays": total_days,
        "category": prescription.get("category") or prescription.get("type") or "General",
    }


def transform_prescriptions(prescriptions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    now = datetime.now()
    return [transform_prescription(prescription, now) for prescription in prescriptions]


# =============================================================================
# SPECIALTIES
# =============================================================================

def transform_specialties(specialties: List[Any]) -> List[str]:
    return [str(s) for s in specialties if s]


# =============================================================================
# DASHBOARD METRICS
# =============================================================================

def compute_dashboard_metrics(
    doctors: List[Dict[str, Any]],
    appointments: List[Dict[str, Any]],
    role: str = "patient",
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Derive dashboard counts from transformed doctors and appointments.

    An appointment is upcoming when its datetime is at or after ``now``;
    entries without a parseable datetime are not counted.
    """
    now = to_local_naive(now) if now else datetime.now()

    doctors_df = pd.DataFrame(doctors)
    available = 0
    if "isAvailable" in doctors_df.columns:
        available = int(doctors_df["isAvailable"].fillna(False).astype(bool).sum())

    upcoming = 0
    if appointments:
        when = pd.to_datetime(
            pd.Series([parse_datetime(a.get("appointmentDateTime")) for a in appointments], dtype="object"),
            errors="coerce",
        )
        upcoming = int((when >= pd.Timestamp(now)).sum())

    return {
        "totalDoctors": len(doctors),
        "availableDoctors": available,
        "upcomingAppointments": upcoming,
        "totalAppointments": len(appointments),
        "role": role,
        "lastUpdated": datetime.now().isoformat(),
    }
