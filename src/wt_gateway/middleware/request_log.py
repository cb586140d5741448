"""Request logging middleware.

One access line per request, tagged with the user, wager or event id taken
from the matched route and, on failure, the error kind the handler reported.
Responses with status 400 and up log at WARNING.

    INFO    [POST] /api/v1/wagers/0001.../settle → 200 (23ms) req_a1b2c3d4e5f6 wager_id=0001...
    WARNING [POST] /api/v1/wagers/0001.../settle → 409 (4ms) req_9f8e7d6c5b4a wager_id=0001... kind=ALREADY_SETTLED

request.state.request_id is set before the route runs so handlers can echo it
in ApiResponse.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("wt.request")

_ENTITY_PARAMS = ("user_id", "wager_id", "event_id")


def request_tags(request: Request) -> str:
    """``name=value`` pairs for the entity ids in the route plus the error kind, if any."""
    # the router writes path_params into the shared scope once a route matches
    params = request.scope.get("path_params") or {}
    tags = [f"{name}={params[name]}" for name in _ENTITY_PARAMS if name in params]
    kind = getattr(request.state, "error_kind", None)
    if kind:
        tags.append(f"kind={kind}")
    return " ".join(tags)


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = f"req_{uuid.uuid4().hex[:12]}"

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        tags = request_tags(request)
        logger.log(
            logging.WARNING if response.status_code >= 400 else logging.INFO,
            "[%s] %s → %d (%.0fms) %s%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
            f" {tags}" if tags else "",
        )
        return response
