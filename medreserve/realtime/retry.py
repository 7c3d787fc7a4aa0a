"""
Retry with exponential backoff for the real-time fetch rounds.

delay(n) = base_delay * 2**n for n = 0 .. max_retries - 1
"""
from __future__ import annotations
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple, Type, TypeVar

from medreserve.errors import AuthenticationError
from medreserve.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class RetryState:
    """Per-call bookkeeping; dropped when the call resolves."""
    resource: str
    attempt: int = 0
    last_delay: float = 0.0
    delays: List[float] = field(default_factory=list)
    last_error: Optional[BaseException] = None


@dataclass
class RetryPolicy:
    base_delay: float = 5.0
    max_retries: int = 3
    retry_on: Tuple[Type[BaseException], ...] = (Exception,)
    never_retry: Tuple[Type[BaseException], ...] = (AuthenticationError,)

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * (2 ** attempt)

    def delays(self) -> List[float]:
        return [self.delay_for(n) for n in range(self.max_retries)]

    def run(
        self,
        operation: Callable[[], T],
        operation_name: str,
        state: Optional[RetryState] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> T:
        """
        Call ``operation`` until it succeeds or attempts run out.

        Raises the last error once every attempt failed, or immediately for
        errors listed in ``never_retry`` and errors outside ``retry_on``.
        """
        state = state or RetryState(resource=operation_name)

        for attempt in range(self.max_attempts):
            state.attempt = attempt + 1
            try:
                result = operation()
            except self.never_retry as e:
                state.last_error = e
                logger.warning(f"{operation_name} failed with a non-retryable error: {e}")
                raise
            except self.retry_on as e:
                state.last_error = e
                if attempt == self.max_retries:
                    break

                delay = self.delay_for(attempt)
                state.last_delay = delay
                state.delays.append(delay)
                logger.warning(
                    f"{operation_name} failed (attempt {attempt + 1}/{self.max_attempts}), "
                    f"retrying in {delay:.1f}s... {e}"
                )
                sleep(delay)
                continue

            if attempt > 0:
                logger.info(f"{operation_name} succeeded on attempt {attempt + 1}")
            return result

        raise state.last_error
