"""
HTTP request logging middleware.

Binds the request id, and for session and tool routes the session id or
tool name, so engine and dispatch events logged while the request runs
carry them too. Each request ends with one ``http_request`` event.
"""

import time
import uuid
from typing import Dict

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.stdlib.get_logger("http")


def route_context(path: str) -> Dict[str, str]:
    """Pull the session id or tool name out of a request path.

    Routing has not run yet when the middleware sees the request, so path
    params are not available.
    """
    parts = [part for part in path.split("/") if part]
    if len(parts) >= 2 and parts[0] == "sessions":
        return {"session_id": parts[1]}
    if len(parts) == 2 and parts[0] == "tools":
        return {"tool": parts[1]}
    return {}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests with timing, status and conversation context."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]
        context = route_context(request.url.path)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id, **context)

        start = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["x-request-id"] = request_id
            return response
        finally:
            if status_code >= 500:
                log = logger.error
            elif status_code == 404 and context:
                # Unknown or expired session, or an unknown tool
                log = logger.info
            elif status_code >= 400:
                log = logger.warning
            else:
                log = logger.info

            log(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 1),
            )
            structlog.contextvars.clear_contextvars()
