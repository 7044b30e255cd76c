"""Circuit breaker guarding calls to the booking API.

After ``failure_threshold`` consecutive transport failures the breaker
opens and calls fail immediately with CircuitBreakerOpen. Once
``reset_timeout`` seconds have passed a single trial call is let through
(half-open); its outcome closes or re-opens the circuit.

Only exceptions listed in ``tracked_exceptions`` count as failures, so a
4xx answer from the API (wrong PIN, slot taken) never trips the breaker.
"""
import time
from enum import Enum
from typing import Any, Callable, Optional, Tuple, Type

from nail_booking.errors import ApiUnavailable
from nail_booking.logging_config import get_logger

logger = get_logger(__name__)


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerOpen(ApiUnavailable):
    """Raised instead of calling the API while the circuit is open."""


class CircuitBreaker:
    """Three-state breaker around a callable."""

    def __init__(
        self,
        name: str = "booking-api",
        failure_threshold: int = 5,
        reset_timeout: float = 60,
        tracked_exceptions: Tuple[Type[BaseException], ...] = (ApiUnavailable,),
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self.tracked_exceptions = tracked_exceptions
        self._clock = clock
        self.failure_count = 0
        self.opened_at: Optional[float] = None
        self._state = CircuitState.CLOSED

    @property
    def state(self) -> str:
        return self._state.value

    def call(self, func: Callable, *args, **kwargs) -> Any:
        """
        Run ``func`` unless the circuit is open.

        Raises:
            CircuitBreakerOpen: circuit open and reset timeout not reached
        """
        if self._state is CircuitState.OPEN:
            remaining = self._seconds_until_trial()
            if remaining > 0:
                raise CircuitBreakerOpen(
                    f"Serviço temporariamente indisponível. Tente novamente em {remaining:.0f}s."
                )
            self._set_state(CircuitState.HALF_OPEN)

        try:
            result = func(*args, **kwargs)
        except self.tracked_exceptions:
            self._record_failure()
            raise

        self._record_success()
        return result

    def reset(self):
        """Force the breaker back to closed."""
        self.failure_count = 0
        self.opened_at = None
        self._set_state(CircuitState.CLOSED)

    def _seconds_until_trial(self) -> float:
        if self.opened_at is None:
            return 0
        return max(0.0, self.reset_timeout - (self._clock() - self.opened_at))

    def _record_success(self):
        self.failure_count = 0
        if self._state is not CircuitState.CLOSED:
            self.opened_at = None
            self._set_state(CircuitState.CLOSED)

    def _record_failure(self):
        self.failure_count += 1
        if (
            self._state is CircuitState.HALF_OPEN
            or self.failure_count >= self.failure_threshold
        ):
            self.opened_at = self._clock()
            self._set_state(CircuitState.OPEN)

    def _set_state(self, new_state: CircuitState):
        if new_state is self._state:
            return
        logger.warning(
            "circuit_state_changed",
            breaker=self.name,
            old=self._state.value,
            new=new_state.value,
            failures=self.failure_count,
        )
        self._state = new_state
