"""Access log and request correlation.

A caller-supplied X-Request-ID is kept (so a retrying client or an upstream
proxy can follow one bid through the logs); otherwise a fresh `req_…` id is
minted. The id goes into request.state for the ApiResponse envelope and
back out in the X-Request-ID response header.

    INFO    [POST] /api/v1/bids → 200 (23ms) req_a1b2c3d4e5f6
    WARNING [POST] /api/v1/bids → 409 (2004ms) req_0f9e8d7c6b5a
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("am.request")

_HEADER = "X-Request-ID"
_MAX_INBOUND_ID_LENGTH = 64
_QUIET_PATHS = frozenset({"/health"})


def _request_id(request: Request) -> str:
    inbound = request.headers.get(_HEADER, "").strip()
    if inbound and len(inbound) <= _MAX_INBOUND_ID_LENGTH and inbound.isprintable():
        return inbound
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _request_id(request)
        request.state.request_id = request_id

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers[_HEADER] = request_id

        if request.url.path in _QUIET_PATHS and response.status_code < 400:
            return response
        # 409 (busy auction, settlement already running) and 5xx log at WARNING
        status = response.status_code
        level = logging.WARNING if status == 409 or status >= 500 else logging.INFO
        logger.log(
            level,
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        return response
