"""
Circuit Breaker for upstream chain and explorer calls.

State Machine:
    CLOSED -> OPEN -> HALF_OPEN -> CLOSED
                          |
                          +-> OPEN (any failure)

- CLOSED: Normal operation, counting consecutive failures
- OPEN: Refusing calls until the timeout passes
- HALF_OPEN: Letting a few probe calls through
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from coffre.infrastructure.monitoring import metrics
from coffre.infrastructure.monitoring.logger import get_logger
from coffre.infrastructure.resilience.exceptions import CircuitBreakerOpenError

logger = get_logger(__name__)


class CircuitBreakerState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreakerConfig:
    """
    Circuit breaker configuration.

    Attributes:
        failure_threshold: Consecutive failures before opening
        success_threshold: Probe successes needed to close from half-open
        timeout: Seconds to stay open before probing
        half_open_max_calls: Probe calls allowed while half-open
    """

    failure_threshold: int = 5
    success_threshold: int = 2
    timeout: float = 60.0
    half_open_max_calls: int = 3


class CircuitBreaker:
    """
    Async circuit breaker.

    Example:
        breaker = CircuitBreaker("ethereum_rpc")
        balance = await breaker.call(w3.eth.get_balance, address)
    """

    def __init__(
        self,
        name: str,
        config: Optional[CircuitBreakerConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._clock = clock

        self._state = CircuitBreakerState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._opened_at: Optional[float] = None
        self._half_open_calls = 0

    @property
    def state(self) -> CircuitBreakerState:
        """Current state, moving OPEN to HALF_OPEN once the timeout passed."""
        if (
            self._state == CircuitBreakerState.OPEN
            and self._opened_at is not None
            and self._clock() - self._opened_at >= self.config.timeout
        ):
            self._transition(CircuitBreakerState.HALF_OPEN)
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    async def call(
        self, func: Callable[..., Awaitable[Any]], *args, **kwargs
    ) -> Any:
        """
        Await func with circuit breaker protection.

        Raises:
            CircuitBreakerOpenError: If circuit is open
            Exception: Any exception from the function
        """
        state = self.state
        if state == CircuitBreakerState.OPEN:
            raise CircuitBreakerOpenError(self.name, self._failure_count)
        if state == CircuitBreakerState.HALF_OPEN:
            if self._half_open_calls >= self.config.half_open_max_calls:
                raise CircuitBreakerOpenError(self.name, self._failure_count)
            self._half_open_calls += 1

        try:
            result = await func(*args, **kwargs)
        except Exception:
            self._on_failure()
            raise

        self._on_success()
        return result

    def _on_success(self) -> None:
        if self._state == CircuitBreakerState.HALF_OPEN:
            self._success_count += 1
            if self._success_count >= self.config.success_threshold:
                self._transition(CircuitBreakerState.CLOSED)
        else:
            self._failure_count = 0

    def _on_failure(self) -> None:
        self._failure_count += 1

        if self._state == CircuitBreakerState.HALF_OPEN:
            self._transition(CircuitBreakerState.OPEN)
        elif self._failure_count >= self.config.failure_threshold:
            self._transition(CircuitBreakerState.OPEN)

    def _transition(self, state: CircuitBreakerState) -> None:
        if state == self._state:
            return

        self._state = state
        self._success_count = 0
        self._half_open_calls = 0
        if state == CircuitBreakerState.OPEN:
            self._opened_at = self._clock()
        elif state == CircuitBreakerState.CLOSED:
            self._failure_count = 0
            self._opened_at = None

        metrics.circuit_breaker_state_changes_total.labels(
            breaker=self.name, state=state.value
        ).inc()
        logger.warning(f"Circuit breaker '{self.name}' -> {state.value}")

    def reset(self) -> None:
        """Manually close the circuit."""
        self._transition(CircuitBreakerState.CLOSED)

    def get_stats(self) -> dict:
        return {
            "name": self.name,
            "state": self.state.value,
            "failure_count": self._failure_count,
            "success_count": self._success_count,
        }
