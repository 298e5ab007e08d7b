"""
Resilience patterns for upstream calls.
"""

from coffre.infrastructure.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerState,
)
from coffre.infrastructure.resilience.exceptions import (
    CircuitBreakerOpenError,
    RetryError,
)
from coffre.infrastructure.resilience.retry import Retry, RetryConfig

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitBreakerState",
    "CircuitBreakerOpenError",
    "Retry",
    "RetryConfig",
    "RetryError",
]
