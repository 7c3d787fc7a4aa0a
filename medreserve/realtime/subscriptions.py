# =============================================================================
# medreserve/realtime/subscriptions.py
# Polling Subscriptions - shared refresh timers with callback fan-out
# =============================================================================
"""
SubscriptionManager - lets many page components observe one resource while
paying for a single polling loop.

Callbacks receive ``(data, None)`` after every successful fetch and
``(None, error)`` when the fetch itself raised.

Usage:
------
subscriptions = SubscriptionManager(service)

def on_doctors(data, error):
    ...

subscriptions.subscribe("doctors", on_doctors, interval=30)
subscriptions.refresh("doctors")
subscriptions.unsubscribe("doctors", on_doctors)
"""

from __future__ import annotations
import threading
from typing import Any, Callable, Dict, List, Optional

from medreserve.logging import get_logger
from medreserve.realtime.data_service import RealTimeDataService

logger = get_logger(__name__)

Subscriber = Callable[[Any, Optional[BaseException]], None]

DEFAULT_REFRESH_INTERVAL = 30.0


class RefreshTimer(threading.Thread):
    """Recurring tick for one resource until stop() is called."""

    def __init__(self, resource: str, interval: float, tick: Callable[[str], None]):
        super().__init__(daemon=True, name=f"RefreshTimer-{resource}")
        self.resource = resource
        self.interval = interval
        self._tick = tick
        self._stop_event = threading.Event()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run(self) -> None:
        while not self._stop_event.wait(timeout=self.interval):
            try:
                self._tick(self.resource)
            except Exception as e:
                logger.error(f"Error in {self.resource} refresh tick: {e}")

    def stop(self) -> None:
        self._stop_event.set()


class SubscriptionManager:
    """
    Subscriber registry and refresh timers over a RealTimeDataService.

    At most one RefreshTimer runs per resource. It starts with the first
    subscriber and stops when the last one leaves.
    """

    def __init__(self, service: RealTimeDataService):
        self._service = service
        # dict keys keep insertion order and dedupe by identity/equality
        self._subscribers: Dict[str, Dict[Subscriber, None]] = {}
        self._timers: Dict[str, RefreshTimer] = {}
        self._in_flight: Dict[str, int] = {}
        self._pending: List[threading.Thread] = []
        self._lock = threading.Lock()

        self._service.add_invalidation_listener(self._on_invalidated)

    @property
    def service(self) -> RealTimeDataService:
        return self._service

    def subscribers(self, name: str) -> List[Subscriber]:
        with self._lock:
            return list(self._subscribers.get(name, {}))

    def active_timers(self) -> List[str]:
        with self._lock:
            return sorted(
                name for name, timer in self._timers.items()
                if timer.is_alive() and not timer.stopped
            )

    # =========================================================================
    # SUBSCRIBE / UNSUBSCRIBE
    # =========================================================================

    def subscribe(
        self,
        name: str,
        callback: Subscriber,
        interval: float = DEFAULT_REFRESH_INTERVAL,
    ) -> None:
        """
        Register ``callback`` for ``name``.

        A cached value is delivered to the new callback before this returns.
        Without one, an immediate fetch runs in the background and its result
        reaches every subscriber.

        Raises:
            UnknownResourceError: when the service has no strategy for ``name``
        """
        self._service.ensure_known(name)

        cached = None
        with self._lock:
            self._subscribers.setdefault(name, {})[callback] = None

            if name not in self._timers:
                timer = RefreshTimer(name, interval, self._on_tick)
                self._timers[name] = timer
                timer.start()
                logger.debug(f"Started {interval}s refresh timer for {name}")

            # a fetch already running will broadcast to this callback too
            if self._in_flight.get(name, 0) == 0:
                cached = self._service.get_cached(name)
                if cached is None:
                    self._start_background_fetch(name)

        if cached is not None:
            self._deliver(name, [callback], cached, None)

    def unsubscribe(self, name: str, callback: Subscriber) -> None:
        timer = None
        with self._lock:
            callbacks = self._subscribers.get(name)
            if callbacks is None:
                return
            callbacks.pop(callback, None)

            if not callbacks:
                del self._subscribers[name]
                timer = self._timers.pop(name, None)

        if timer is not None:
            timer.stop()
            logger.debug(f"Stopped refresh timer for {name}")

    # =========================================================================
    # FETCHING
    # =========================================================================

    def refresh(self, name: str) -> Any:
        """Fetch now and broadcast to every subscriber; returns the data."""
        self._service.ensure_known(name)
        with self._lock:
            self._in_flight[name] = self._in_flight.get(name, 0) + 1
        return self._fetch_and_broadcast(name)

    def _on_tick(self, name: str) -> None:
        with self._lock:
            if name not in self._subscribers:
                return
            if self._in_flight.get(name, 0) > 0:
                logger.debug(f"Skipping {name} tick, fetch already in flight")
                return
            self._in_flight[name] = 1
        self._fetch_and_broadcast(name)

    def _on_invalidated(self) -> None:
        with self._lock:
            for name in list(self._subscribers):
                if self._in_flight.get(name, 0) == 0:
                    self._start_background_fetch(name)

    def _start_background_fetch(self, name: str) -> None:
        """Caller holds the lock."""
        self._in_flight[name] = self._in_flight.get(name, 0) + 1
        self._pending = [t for t in self._pending if t.is_alive()]

        thread = threading.Thread(
            target=self._fetch_and_broadcast,
            args=(name,),
            daemon=True,
            name=f"Fetch-{name}",
        )
        self._pending.append(thread)
        thread.start()

    def _fetch_and_broadcast(self, name: str) -> Any:
        data, error = None, None
        try:
            data = self._service.fetch(name)
        except Exception as e:
            logger.error(f"Fetch for {name} subscribers failed: {e}")
            error = e

        with self._lock:
            self._in_flight[name] = max(0, self._in_flight.get(name, 0) - 1)
            callbacks = list(self._subscribers.get(name, {}))

        self._deliver(name, callbacks, data, error)
        return data

    def _deliver(
        self,
        name: str,
        callbacks: List[Subscriber],
        data: Any,
        error: Optional[BaseException],
    ) -> None:
        for callback in callbacks:
            try:
                callback(data, error)
            except Exception as e:
                logger.error(f"Error in {name} subscriber callback: {e}", exc_info=True)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def wait_for_pending(self, timeout: Optional[float] = None) -> bool:
        """Join background fetches; True when none is still running."""
        with self._lock:
            pending = list(self._pending)

        for thread in pending:
            thread.join(timeout)

        with self._lock:
            self._pending = [t for t in self._pending if t.is_alive()]
            return not self._pending

    def cleanup(self, timeout: float = 1.0) -> None:
        """Stop every timer and drop every subscriber."""
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
            self._subscribers.clear()

        for timer in timers:
            timer.stop()
        for timer in timers:
            if timer is not threading.current_thread():
                timer.join(timeout)

        self._service.remove_invalidation_listener(self._on_invalidated)
        logger.info("Subscriptions cleaned up")
