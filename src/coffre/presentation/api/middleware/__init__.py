"""
API middleware and exception handlers.
"""

from coffre.presentation.api.middleware.error_handler import (
    coffre_exception_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from coffre.presentation.api.middleware.metrics_middleware import MetricsMiddleware
from coffre.presentation.api.middleware.rate_limit_middleware import (
    RateLimitMiddleware,
)
from coffre.presentation.api.middleware.request_id_middleware import (
    RequestIDMiddleware,
)

__all__ = [
    "coffre_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "unhandled_exception_handler",
    "MetricsMiddleware",
    "RateLimitMiddleware",
    "RequestIDMiddleware",
]
