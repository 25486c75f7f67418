"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config.settings import settings
from src.gm_admin.api.router import router as admin_router
from src.gm_common.database import check_database, engine
from src.gm_common.errors import AppError, InternalError, ValidationError
from src.gm_common.redis_client import close_redis
from src.gm_common.response import FieldError, error_response
from src.gm_gateway.api.router import router as auth_router
from src.gm_gateway.middleware.rate_limit import RateLimitMiddleware
from src.gm_gateway.middleware.request_log import RequestLogMiddleware
from src.gm_listing.api.router import router as listing_router
from src.gm_order.api.router import router as order_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify the database. Shutdown: dispose DB and Redis pools."""
    await check_database()
    logger.info(
        "%s started (order rate limit %d/min)",
        settings.APP_NAME, settings.RATE_LIMIT_ORDERS_PER_MINUTE,
    )
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# Added last = outermost: request_id is set before the rate limiter runs.
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)


def _with_request_id(request: Request, content: dict) -> dict:
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        content["request_id"] = request_id
    return content


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=_with_request_id(request, resp.model_dump()),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        FieldError(
            field=".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            message=err.get("msg", "invalid value"),
        )
        for err in exc.errors()
    ]
    wrapped = ValidationError("Request validation failed")
    resp = error_response(wrapped.code, wrapped.message, errors)
    return JSONResponse(
        status_code=wrapped.http_status,
        content=_with_request_id(request, resp.model_dump()),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    internal = InternalError()
    resp = error_response(internal.code, internal.message)
    return JSONResponse(
        status_code=internal.http_status,
        content=_with_request_id(request, resp.model_dump()),
    )


app.include_router(auth_router, prefix="/api/v1")
app.include_router(listing_router, prefix="/api/v1")
app.include_router(order_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
