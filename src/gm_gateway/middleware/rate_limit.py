"""Fixed-window rate limiting for order placement.

    POST /api/v1/orders: RATE_LIMIT_ORDERS_PER_MINUTE per user (0 disables)

Counting uses Redis INCR + EXPIRE on "ratelimit:{subject}:orders". The subject
is the token's ``sub`` when a valid access token is present, otherwise the
client IP (first X-Forwarded-For hop when behind a proxy). If Redis is
unreachable the request is let through and the failure logged.
"""

import logging

from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from config.settings import settings
from src.gm_common.errors import AppError, RateLimitError
from src.gm_common.redis_client import incr_window
from src.gm_common.response import error_response
from src.gm_gateway.auth.jwt_handler import decode_token

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60
_LIMITED_ROUTES = {("POST", "/api/v1/orders"): "orders"}


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _subject(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() == "bearer" and token:
        try:
            return f"user:{decode_token(token, expected_type='access')['sub']}"
        except (AppError, KeyError):
            pass
    return f"ip:{_client_ip(request)}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        group = _LIMITED_ROUTES.get((request.method, request.url.path.rstrip("/")))
        limit = settings.RATE_LIMIT_ORDERS_PER_MINUTE
        if group is None or limit <= 0:
            return await call_next(request)

        key = f"ratelimit:{_subject(request)}:{group}"
        try:
            count = await incr_window(key, _WINDOW_SECONDS)
        except (RedisError, OSError):
            logger.warning("Rate limiter unavailable, allowing %s", key, exc_info=True)
            return await call_next(request)

        if count > limit:
            exc = RateLimitError()
            logger.info("Rate limit exceeded for %s (%d/%d)", key, count, limit)
            return JSONResponse(
                status_code=exc.http_status,
                content=error_response(exc.code, exc.message).model_dump(),
                headers={"Retry-After": str(_WINDOW_SECONDS)},
            )
        return await call_next(request)
