"""
Rate limiting infrastructure.
"""

from coffre.infrastructure.rate_limiting.rate_limiter import RateLimiter

__all__ = ["RateLimiter"]
