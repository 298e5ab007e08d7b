"""
HTTP request metrics.
"""

import time
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from coffre.infrastructure.monitoring import metrics


def endpoint_label(request: Request) -> str:
    """Route template (/api/transfer/simulate/{simulation_id}) when matched."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def error_class(status_code: int) -> Optional[str]:
    if status_code >= 500:
        return "server_error"
    if status_code >= 400:
        return "client_error"
    return None


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Count and time every request, labelled by route template.

    Exceptions escaping the app are counted under their class name and
    re-raised for the error handlers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            self._record(request, started, error_type=type(e).__name__)
            raise

        self._record(
            request,
            started,
            status_code=response.status_code,
            error_type=error_class(response.status_code),
        )
        return response

    @staticmethod
    def _record(
        request: Request,
        started: float,
        status_code: Optional[int] = None,
        error_type: Optional[str] = None,
    ) -> None:
        labels = {"method": request.method, "endpoint": endpoint_label(request)}

        metrics.http_request_duration_seconds.labels(**labels).observe(
            time.perf_counter() - started
        )
        if status_code is not None:
            metrics.http_requests_total.labels(**labels, status=status_code).inc()
        if error_type is not None:
            metrics.http_errors_total.labels(**labels, error_type=error_type).inc()
