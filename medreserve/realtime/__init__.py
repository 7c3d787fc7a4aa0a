# =============================================================================
# medreserve/realtime/__init__.py
# Real-time data: fetch/fallback service and polling subscriptions
# =============================================================================

from .synthetic import SyntheticDataGenerator, fallback_dashboard_metrics
from .retry import RetryPolicy, RetryState
from .strategies import (
    APPOINTMENTS,
    DASHBOARD_METRICS,
    DOCTORS,
    MEDICAL_REPORTS,
    PRESCRIPTIONS,
    SPECIALTIES,
    ResourceStrategy,
    build_default_strategies,
)
from .data_service import (
    SOURCE_CACHE,
    SOURCE_FALLBACK,
    SOURCE_NETWORK,
    SOURCE_STALE,
    CacheEntry,
    RealTimeDataService,
)
from .subscriptions import RefreshTimer, SubscriptionManager

__all__ = [
    "SyntheticDataGenerator",
    "fallback_dashboard_metrics",
    "RetryPolicy",
    "RetryState",
    "ResourceStrategy",
    "build_default_strategies",
    "DOCTORS",
    "APPOINTMENTS",
    "MEDICAL_REPORTS",
    "PRESCRIPTIONS",
    "DASHBOARD_METRICS",
    "SPECIALTIES",
    "CacheEntry",
    "RealTimeDataService",
    "SOURCE_NETWORK",
    "SOURCE_CACHE",
    "SOURCE_STALE",
    "SOURCE_FALLBACK",
    "RefreshTimer",
    "SubscriptionManager",
]
