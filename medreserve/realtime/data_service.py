# =============================================================================
# medreserve/realtime/data_service.py
# Real-Time Data Service - cache-or-fetch with retry and synthetic fallback
# =============================================================================
"""
RealTimeDataService - best-effort read path for the dashboard resources.

fetch(name) never raises for a registered resource:

    offline + cached      -> cached value, no network call
    network round ok      -> transform, cache, return
    all rounds failed     -> stale cache, else synthetic fallback (cached)

Usage:
------
service = RealTimeDataService(build_default_strategies(client, generator), connection)
doctors = service.fetch("doctors")
metrics = service.get_dashboard_metrics("patient")
"""

from __future__ import annotations
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from medreserve.api import unwrap_collection
from medreserve.errors import (
    AuthenticationError,
    MalformedPayloadError,
    MedReserveError,
    UnknownResourceError,
)
from medreserve.logging import get_logger
from medreserve.offline import ConnectionManager, ConnectionState
from medreserve.realtime.retry import RetryPolicy, RetryState
from medreserve.realtime.strategies import (
    APPOINTMENTS,
    DASHBOARD_METRICS,
    DOCTORS,
    ResourceStrategy,
)
from medreserve.realtime.synthetic import fallback_dashboard_metrics
from medreserve.realtime.transforms import compute_dashboard_metrics

logger = get_logger(__name__)

# Where the last value returned for a resource came from
SOURCE_NETWORK = "network"
SOURCE_CACHE = "cache"
SOURCE_STALE = "stale"
SOURCE_FALLBACK = "fallback"


@dataclass
class CacheEntry:
    """Most recent committed payload for one resource."""
    resource: str
    data: Any
    source: str
    sequence: int
    updated_at: datetime = field(default_factory=datetime.now)


class RealTimeDataService:
    """
    Per-resource fetch orchestration with in-memory caching.

    The cache, sequence counters and retry states are instance fields, so
    every test (or page session) can own an isolated service.
    """

    def __init__(
        self,
        strategies: Mapping[str, ResourceStrategy],
        connection: Optional[ConnectionManager] = None,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        default_role: str = "patient",
    ):
        self._strategies: Dict[str, ResourceStrategy] = dict(strategies)
        self._strategies.setdefault(
            DASHBOARD_METRICS,
            ResourceStrategy(
                name=DASHBOARD_METRICS,
                loader=lambda: self.get_dashboard_metrics(default_role),
                fallback=lambda: fallback_dashboard_metrics(default_role),
            ),
        )
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep

        self._cache: Dict[str, CacheEntry] = {}
        self._sequence: Dict[str, int] = {}
        self._retry_states: Dict[Tuple[str, int], RetryState] = {}
        self._last_source: Dict[str, str] = {}
        self._invalidation_listeners: List[Callable[[], None]] = []
        self._lock = threading.Lock()

        self._connection = connection or ConnectionManager()
        self._connection.register_callback(self._on_connection_change)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def connection(self) -> ConnectionManager:
        return self._connection

    @property
    def is_online(self) -> bool:
        return self._connection.is_online

    @property
    def resources(self) -> List[str]:
        return sorted(self._strategies)

    def ensure_known(self, name: str) -> ResourceStrategy:
        strategy = self._strategies.get(name)
        if strategy is None:
            raise UnknownResourceError(name, known=list(self._strategies))
        return strategy

    # =========================================================================
    # FETCH
    # =========================================================================

    def fetch(self, name: str) -> Any:
        """
        Best-effort read of a resource.

        Raises:
            UnknownResourceError: when no strategy is registered for ``name``
        """
        strategy = self.ensure_known(name)

        if not self.is_online:
            entry = self._cache.get(name)
            if entry is not None:
                logger.info(f"Using cached {name} data (offline)")
                self._last_source[name] = SOURCE_CACHE
                return entry.data

        sequence = self._next_sequence(name)

        try:
            if strategy.loader is not None:
                data, source = strategy.loader(), SOURCE_NETWORK
            else:
                data, source = self._fetch_from_network(strategy, sequence)
        except Exception as e:
            logger.error(f"All {name} API endpoints failed after retries: {e}", exc_info=True)

            entry = self._cache.get(name)
            if entry is not None:
                logger.info(f"Using cached {name} data")
                self._last_source[name] = SOURCE_STALE
                return entry.data

            data, source = strategy.fallback(), SOURCE_FALLBACK

        return self._commit(name, sequence, data, source)

    def _fetch_from_network(self, strategy: ResourceStrategy, sequence: int) -> Tuple[Any, str]:
        name = strategy.name
        logger.info(f"Fetching {name} from API...")

        state = RetryState(resource=name)
        self._retry_states[(name, sequence)] = state
        try:
            payload = self.retry_policy.run(
                lambda: self._run_round(strategy),
                f"Fetch {name}",
                state=state,
                sleep=self._sleep,
            )
        finally:
            self._retry_states.pop((name, sequence), None)

        records = unwrap_collection(payload)
        if not records and strategy.empty_is_fallback:
            logger.info(f"API returned no {name}; serving fallback data")
            return strategy.fallback(), SOURCE_FALLBACK

        return strategy.transform(records), SOURCE_NETWORK

    def _run_round(self, strategy: ResourceStrategy) -> Any:
        """One pass over the candidates; the first valid collection wins."""
        last_error: Optional[Exception] = None
        auth_error: Optional[AuthenticationError] = None

        for index, candidate in enumerate(strategy.candidates, start=1):
            try:
                payload = candidate()
            except AuthenticationError as e:
                auth_error = last_error = e
                logger.warning(f"{strategy.name} endpoint {index} rejected the session, trying next...")
                continue
            except MedReserveError as e:
                last_error = e
                logger.warning(f"{strategy.name} endpoint {index} failed, trying next... {e.message}")
                continue
            except Exception as e:
                last_error = e
                logger.warning(f"{strategy.name} endpoint {index} raised {type(e).__name__}, trying next... {e}")
                continue

            if unwrap_collection(payload) is not None:
                logger.info(f"Successfully fetched {strategy.name} from API")
                return payload

            last_error = MalformedPayloadError(
                f"No collection in {strategy.name} response",
                source=f"{strategy.name}#{index}",
                expected="list or {content|data: [...]}",
            )
            logger.warning(f"{strategy.name} endpoint {index} returned an unexpected shape, trying next...")

        if auth_error is not None:
            raise auth_error
        raise last_error or MalformedPayloadError(f"All {strategy.name} API endpoints failed")

    # =========================================================================
    # CACHE
    # =========================================================================

    def _next_sequence(self, name: str) -> int:
        with self._lock:
            sequence = self._sequence.get(name, 0) + 1
            self._sequence[name] = sequence
            return sequence

    def _commit(self, name: str, sequence: int, data: Any, source: str) -> Any:
        """Store a result unless a newer fetch for the resource was issued since."""
        with self._lock:
            if sequence != self._sequence.get(name):
                current = self._cache.get(name)
                logger.info(f"Discarding superseded {name} result (sequence {sequence})")
                return current.data if current is not None else data

            self._cache[name] = CacheEntry(
                resource=name,
                data=data,
                source=source,
                sequence=sequence,
            )
            self._last_source[name] = source
        return data

    def get_cached(self, name: str) -> Any:
        entry = self._cache.get(name)
        return entry.data if entry is not None else None

    def cache_entry(self, name: str) -> Optional[CacheEntry]:
        return self._cache.get(name)

    def provenance(self, name: str) -> Optional[str]:
        """network / cache / stale / fallback for the last value served"""
        return self._last_source.get(name)

    def retry_states(self) -> List[RetryState]:
        return list(self._retry_states.values())

    def clear_cache(self, name: Optional[str] = None) -> None:
        with self._lock:
            if name is None:
                self._cache.clear()
                self._last_source.clear()
            else:
                self._cache.pop(name, None)
                self._last_source.pop(name, None)

    def reset(self) -> None:
        """Drop every cache entry, counter and retry state."""
        with self._lock:
            self._cache.clear()
            self._sequence.clear()
            self._retry_states.clear()
            self._last_source.clear()
        logger.info("Real-time data service reset")

    # =========================================================================
    # CONNECTIVITY
    # =========================================================================

    def add_invalidation_listener(self, listener: Callable[[], None]) -> None:
        """Called after the cache is cleared by a return to online."""
        if listener not in self._invalidation_listeners:
            self._invalidation_listeners.append(listener)

    def remove_invalidation_listener(self, listener: Callable[[], None]) -> None:
        if listener in self._invalidation_listeners:
            self._invalidation_listeners.remove(listener)

    def _on_connection_change(self, state: ConnectionState) -> None:
        if not state.is_online:
            return

        with self._lock:
            self._cache.clear()
            self._retry_states.clear()
            self._last_source.clear()
        logger.info("Cache invalidated after reconnect")

        for listener in list(self._invalidation_listeners):
            try:
                listener()
            except Exception as e:
                logger.error(f"Error in invalidation listener: {e}")

    # =========================================================================
    # DASHBOARD METRICS
    # =========================================================================

    def get_dashboard_metrics(self, role: str = "patient") -> Dict[str, Any]:
        """Counts derived from doctors and appointments, fetched in parallel."""
        try:
            with ThreadPoolExecutor(max_workers=2, thread_name_prefix="dashboard-metrics") as pool:
                doctors_future = pool.submit(self.fetch, DOCTORS)
                appointments_future = pool.submit(self.fetch, APPOINTMENTS)
                doctors = doctors_future.result()
                appointments = appointments_future.result()

            return compute_dashboard_metrics(doctors, appointments, role=role)
        except Exception as e:
            logger.error(f"Dashboard metrics calculation failed: {e}", exc_info=True)
            return fallback_dashboard_metrics(role)
