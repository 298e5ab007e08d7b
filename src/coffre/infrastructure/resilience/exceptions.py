"""
Resilience exceptions.
"""


class CircuitBreakerOpenError(Exception):
    """Raised when a call is refused because the circuit is open."""

    def __init__(self, name: str, failure_count: int):
        self.name = name
        self.failure_count = failure_count
        super().__init__(
            f"Circuit breaker '{name}' is open after {failure_count} failures"
        )


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""

    def __init__(
        self,
        message: str,
        attempts: int,
        last_exception: Exception | None = None,
    ):
        super().__init__(message)
        self.attempts = attempts
        self.last_exception = last_exception
