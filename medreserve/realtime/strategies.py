"""
Fetch strategies for the real-time resources.

A strategy bundles, for one resource name:
- the ordered candidate calls tried in each retry round
- the transform applied to the first valid collection
- the synthetic fallback used once every round failed

Usage:
    strategies = build_default_strategies(client, generator)
    service = RealTimeDataService(strategies, connection)
"""
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Dict, List, Optional

from medreserve.api import (
    AppointmentsAPI,
    DoctorsAPI,
    HttpClient,
    MedicalReportsAPI,
    PrescriptionsAPI,
)
from medreserve.realtime.synthetic import SyntheticDataGenerator
from medreserve.realtime import transforms

# Resource names
DOCTORS = "doctors"
APPOINTMENTS = "appointments"
MEDICAL_REPORTS = "medical-reports"
PRESCRIPTIONS = "prescriptions"
DASHBOARD_METRICS = "dashboard-metrics"
SPECIALTIES = "specialties"

RAW_DOCTORS_PAGE = {"page": 0, "size": 100}


@dataclass
class ResourceStrategy:
    """How to load, shape and substitute one resource"""
    name: str
    fallback: Callable[[], Any]
    candidates: List[Callable[[], Any]] = field(default_factory=list)
    transform: Callable[[list], Any] = list
    # An empty collection is served as fallback data
    empty_is_fallback: bool = False
    # Replaces the candidate rounds for composite resources
    loader: Optional[Callable[[], Any]] = None


def build_default_strategies(
    client: HttpClient,
    generator: SyntheticDataGenerator,
) -> Dict[str, ResourceStrategy]:
    """Strategies for every backend-backed resource (metrics are composed by the service)"""
    doctors_api = DoctorsAPI(client)
    appointments_api = AppointmentsAPI(client)
    reports_api = MedicalReportsAPI(client)
    prescriptions_api = PrescriptionsAPI(client)

    doctors_url = f"{client.base_url}/doctors"

    strategies = [
        ResourceStrategy(
            name=DOCTORS,
            candidates=[
                doctors_api.list_doctors,
                partial(client.fetch_json, doctors_url),
                partial(client.fetch_json, doctors_url, params=RAW_DOCTORS_PAGE),
            ],
            transform=partial(transforms.transform_doctors, generator=generator),
            fallback=generator.fallback_doctors,
        ),
        ResourceStrategy(
            name=APPOINTMENTS,
            candidates=[appointments_api.my_appointments],
            transform=transforms.transform_appointments,
            fallback=generator.fallback_appointments,
            empty_is_fallback=True,
        ),
        ResourceStrategy(
            name=MEDICAL_REPORTS,
            candidates=[reports_api.list_reports],
            transform=transforms.transform_medical_reports,
            fallback=generator.fallback_medical_reports,
            empty_is_fallback=True,
        ),
        ResourceStrategy(
            name=PRESCRIPTIONS,
            candidates=[prescriptions_api.list_prescriptions],
            transform=transforms.transform_prescriptions,
            fallback=generator.fallback_prescriptions,
            empty_is_fallback=True,
        ),
        ResourceStrategy(
            name=SPECIALTIES,
            candidates=[
                doctors_api.get_specialties,
                partial(client.fetch_json, f"{doctors_url}/specialties"),
            ],
            transform=transforms.transform_specialties,
            fallback=generator.fallback_specialties,
            empty_is_fallback=True,
        ),
    ]

    return {strategy.name: strategy for strategy in strategies}
