"""Request logging middleware."""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("sfs.requests")

# Longest error body copied into a log line
MAX_DETAIL_CHARS = 500

# Polled by load balancers; logged at DEBUG only
QUIET_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with method, path, status and duration.

    Error responses also log their body, so the ``detail`` of a 404 or 422
    (unknown statute, malformed date) shows up next to the request line.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - start) * 1000

        status = response.status_code
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"

        if status >= 400 and hasattr(response, "body_iterator"):
            body = b""
            async for chunk in response.body_iterator:
                body += chunk.encode("utf-8") if isinstance(chunk, str) else chunk

            detail = body.decode("utf-8", errors="replace")
            if len(detail) > MAX_DETAIL_CHARS:
                detail = detail[:MAX_DETAIL_CHARS] + "..."

            log = logger.warning if status < 500 else logger.error
            log("%s %s -> %d (%.0fms) %s", request.method, path, status, duration_ms, detail)

            # The body iterator is consumed; hand the client a fresh response
            return Response(
                content=body,
                status_code=status,
                headers=dict(response.headers),
                media_type=response.media_type,
            )

        log = logger.debug if request.url.path in QUIET_PATHS else logger.info
        log("%s %s -> %d (%.0fms)", request.method, path, status, duration_ms)
        return response
