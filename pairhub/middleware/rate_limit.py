from __future__ import annotations

import time

import structlog
from fastapi import Request
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import PlainTextResponse, Response

from pairhub.core.config import settings
from pairhub.redis_client import get_redis

logger = structlog.get_logger(__name__)

LOGIN_PREFIX = "/login/"


def _parse_rate(rate: str) -> tuple[int, int]:
    """
    Parse formats like:
      - "60/minute"
      - "120/hour"
      - "10/second"
    Returns: (limit, window_seconds)
    """
    raw = rate.strip().lower()
    if "/" not in raw:
        raise ValueError(f"Invalid rate format: {rate}")

    limit_str, window_str = raw.split("/", 1)
    limit = int(limit_str)

    windows = {
        "sec": 1, "second": 1, "seconds": 1,
        "min": 60, "minute": 60, "minutes": 60,
        "hour": 3600, "hours": 3600,
        "day": 86400, "days": 86400,
    }
    window = windows.get(window_str.strip())
    if window is None:
        raise ValueError(f"Invalid rate window: {window_str}")
    return limit, window


def _is_exempt(path: str) -> bool:
    for exempt in settings.rate_limit_exempt_paths:
        if path == exempt or path.startswith(exempt.rstrip("/") + "/"):
            return True
    return False


def rate_for_path(path: str) -> str:
    # The OAuth endpoints hit GitHub on every call, so they get their own budget
    if path.startswith(LOGIN_PREFIX):
        return settings.rate_limit_login
    return settings.rate_limit_default


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        if not settings.rate_limit_enabled:
            return await call_next(request)

        path = request.url.path
        if request.method == "OPTIONS" or _is_exempt(path):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"

        try:
            limit, window_seconds = _parse_rate(rate_for_path(path))
        except ValueError:
            logger.warning("rate_limit_misconfigured", path=path)
            return await call_next(request)

        now = int(time.time())
        bucket = now // window_seconds
        key = f"rl:{client_ip}:{request.method}:{path}:{window_seconds}:{bucket}"
        reset = (bucket + 1) * window_seconds

        try:
            r = get_redis()
            count = int(r.incr(key))
            if count == 1:
                r.expire(key, window_seconds)
        except RedisError:
            # Redis outage never takes the site down
            return await call_next(request)

        if count > limit:
            logger.info("rate_limited", client_ip=client_ip, path=path)
            return PlainTextResponse(
                "Too many requests, slow down.",
                status_code=429,
                headers={
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(reset),
                    "Retry-After": str(max(0, reset - now)),
                },
            )

        response = await call_next(request)
        response.headers.setdefault("X-RateLimit-Limit", str(limit))
        response.headers.setdefault("X-RateLimit-Remaining", str(max(0, limit - count)))
        response.headers.setdefault("X-RateLimit-Reset", str(reset))
        return response
