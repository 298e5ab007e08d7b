"""
Rate Limiting Middleware for FastAPI.

Applies a token bucket per client IP and adds rate limit headers to
responses.
"""

from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from coffre.di.container import get_container
from coffre.infrastructure.monitoring import metrics

EXEMPT_ENDPOINTS = frozenset(
    {
        "/",
        "/api/health",
        "/api/health/live",
        "/api/health/ready",
        "/metrics",
        "/docs",
        "/redoc",
        "/openapi.json",
    }
)

# Widths of the ip_address and user_agent columns
MAX_IP_LENGTH = 45
MAX_USER_AGENT_LENGTH = 500


def _as_ip(value: str) -> Optional[IPv4Address | IPv6Address]:
    try:
        return ip_address(value.strip())
    except ValueError:
        return None


def _is_trusted_proxy(peer: str, trusted_proxies: tuple) -> bool:
    address = _as_ip(peer)
    return address is not None and any(
        address in network for network in trusted_proxies
    )


def client_ip(request: Request) -> str:
    """
    Client IP address.

    The first X-Forwarded-For hop is used only when the connecting peer is
    one of the configured trusted proxies and the hop parses as an IP.
    """
    peer = request.client.host if request.client else "unknown"

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for and _is_trusted_proxy(peer, get_container().trusted_proxies):
        forwarded = _as_ip(forwarded_for.split(",")[0])
        if forwarded is not None:
            return str(forwarded)

    return peer[:MAX_IP_LENGTH]


def client_user_agent(request: Request) -> Optional[str]:
    """User-Agent header, truncated to what the stores keep."""
    user_agent = request.headers.get("User-Agent")
    return user_agent[:MAX_USER_AGENT_LENGTH] if user_agent else None


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rate limiting middleware.

    Features:
    - Per-IP token bucket
    - Standard rate limit headers (X-RateLimit-*)
    - 429 Too Many Requests with Retry-After
    """

    def __init__(self, app, enabled: bool = True):
        super().__init__(app)
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next):
        if not self.enabled or request.url.path in EXEMPT_ENDPOINTS:
            return await call_next(request)

        rate_limiter = get_container().rate_limiter
        allowed, info = rate_limiter.check_rate_limit(f"ip:{client_ip(request)}")

        headers = {
            "X-RateLimit-Limit": str(info["limit"]),
            "X-RateLimit-Remaining": str(info["remaining"]),
            "X-RateLimit-Reset": str(info["reset"]),
        }

        if not allowed:
            metrics.rate_limit_rejections_total.labels(endpoint=request.url.path).inc()
            headers["Retry-After"] = str(info["retry_after"])

            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "success": False,
                    "error": "RATE_LIMIT_EXCEEDED",
                    "message": "Too many requests. Please try again later.",
                    "details": {
                        "limit": info["limit"],
                        "reset": info["reset"],
                        "retry_after": info["retry_after"],
                    },
                },
                headers=headers,
            )

        response = await call_next(request)

        for key, value in headers.items():
            response.headers[key] = value

        return response
