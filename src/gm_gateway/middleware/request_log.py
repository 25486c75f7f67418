"""Access log and request correlation.

A caller-supplied ``X-Request-ID`` is kept when it looks sane, otherwise a
fresh ``req_<hex>`` id is minted. Either way it lands on request.state for
ApiResponse and is echoed back in the response header.

    INFO  [POST] /api/v1/orders → 201 (23ms) req_a1b2c3d4e5f6
    ERROR [PATCH] /api/v1/orders/ORD-1/status → 500 (4ms) req_0f9e8d7c6b5a
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("gm.request")

_INCOMING_ID = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")


def _request_id(request: Request) -> str:
    incoming = request.headers.get("X-Request-ID", "")
    if _INCOMING_ID.match(incoming):
        return incoming
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.state.request_id = _request_id(request)

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(
            level,
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        response.headers["X-Request-ID"] = request_id
        return response
