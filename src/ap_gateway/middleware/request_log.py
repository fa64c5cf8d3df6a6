"""Request logging middleware.

Logs every HTTP request with method, path, status code, latency and a
request ID for correlation. An incoming X-Request-ID is reused (so a
front-end retry can be traced across hops); otherwise a short one is
minted. The id is put on request.state for ApiResponse and echoed back
as the X-Request-ID header. Server errors are logged at WARNING.

Log format:
    INFO [POST] /api/v1/assets/ast_…/bids → 201 (12ms) req_a1b2c3d4e5f6
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("ap.request")

_HEADER = "X-Request-ID"
_MAX_INCOMING_LEN = 64


def _request_id(request: Request) -> str:
    incoming = request.headers.get(_HEADER, "").strip()
    if incoming and len(incoming) <= _MAX_INCOMING_LEN and incoming.isprintable():
        return incoming
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = _request_id(request)

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers[_HEADER] = request.state.request_id
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
        )
        return response
