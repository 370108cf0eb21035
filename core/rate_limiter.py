"""Rate limiting configuration for the API.

Uses SlowAPI with in-memory storage (suitable for single-instance deployments).
For multi-instance deployments, set RATE_LIMIT_STORAGE_URI to a Redis URL.

Rate limits are defined per endpoint type:
- Critical: trip planning (graph expansion per request) and data reloads
- Medium: station listings
- Low: health checks
"""

import os
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse


def get_client_identifier(request: Request) -> str:
    """Get client identifier for rate limiting.

    Uses the first X-Forwarded-For address when behind a proxy,
    otherwise the remote address.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    cf_connecting_ip = request.headers.get("CF-Connecting-IP")
    if cf_connecting_ip:
        return cf_connecting_ip

    return get_remote_address(request)


rate_limit_storage = os.getenv("RATE_LIMIT_STORAGE_URI", "memory://")
limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=["200/minute"],
    storage_uri=rate_limit_storage,
    strategy="fixed-window",
)


class RateLimits:
    """Centralized rate limit definitions."""

    # Critical
    TRIP_PLANNER = "30/minute"       # Path expansion can run for seconds
    ADMIN_RELOAD = "2/minute"        # Re-reads the station file

    # Medium
    STATIONS = "200/minute"

    # Low
    HEALTH = "1000/minute"
    DEFAULT = "200/minute"


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return the limit as JSON, in the same shape as other API errors."""
    retry_after = getattr(exc, "retry_after", 60)
    return JSONResponse(
        status_code=429,
        content={
            "error": "RATE_LIMIT_EXCEEDED",
            "message": f"Rate limit exceeded: {exc.detail}",
            "retry_after": retry_after,
        },
        headers={
            "Retry-After": str(retry_after),
            "X-RateLimit-Limit": str(exc.detail) if exc.detail else "unknown",
        }
    )
