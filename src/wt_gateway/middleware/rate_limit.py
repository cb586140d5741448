"""Fixed-window rate limiting for mutating endpoints.

Counts requests per client IP and endpoint group in Redis (INCR, then EXPIRE
on the first hit of a window). Reads are never limited. With
RATE_LIMIT_PER_MINUTE = 0 the middleware passes everything through without
touching Redis.

Key pattern: "ratelimit:{client_ip}:{endpoint_group}"
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from config.settings import settings
from src.wt_common.errors import RateLimitError
from src.wt_common.redis_client import get_redis
from src.wt_common.response import error_response

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60
_MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For when behind a proxy, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def endpoint_group(path: str) -> str:
    """'/api/v1/wagers/123/settle' -> 'wagers'."""
    parts = [p for p in path.split("/") if p]
    if len(parts) >= 3 and parts[0] == "api":
        return parts[2]
    return parts[0] if parts else "root"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        limit_per_minute: int | None = None,
        redis_factory: Callable[[], Awaitable[Any]] = get_redis,
    ) -> None:
        super().__init__(app)
        self._limit = (
            settings.RATE_LIMIT_PER_MINUTE if limit_per_minute is None else limit_per_minute
        )
        self._redis_factory = redis_factory

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if self._limit <= 0 or request.method not in _MUTATING_METHODS:
            return await call_next(request)

        key = f"ratelimit:{client_ip(request)}:{endpoint_group(request.url.path)}"
        redis = await self._redis_factory()
        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, WINDOW_SECONDS)
        if count > self._limit:
            logger.warning("Rate limit exceeded for %s (%d/%d)", key, count, self._limit)
            exc = RateLimitError()
            request.state.error_kind = exc.kind.value
            resp = error_response(exc.code, exc.message, exc.details())
            resp.request_id = getattr(request.state, "request_id", resp.request_id)
            return JSONResponse(
                status_code=exc.http_status,
                content=resp.model_dump(),
                headers={"Retry-After": str(WINDOW_SECONDS)},
            )
        return await call_next(request)
