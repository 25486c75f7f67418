"""gm_order REST endpoints. All require a bearer token.

POST /orders                       buyer places an order (reserves inventory)
GET  /orders                       orders visible to the caller, cursor paginated
GET  /orders/{order_id}            detail (parties and admins)
PUT  /orders/{order_id}/status     role-gated status transition
PUT  /orders/{order_id}/cancel     cancel and restore inventory
POST /orders/{order_id}/rate       buyer or seller rating once delivered
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.gm_common.actor import Actor
from src.gm_common.database import get_db_session
from src.gm_common.enums import OrderStatus
from src.gm_common.response import ApiResponse, success_response
from src.gm_gateway.auth.dependencies import get_current_actor
from src.gm_order.application.schemas import (
    CancelOrderRequest,
    CreateOrderRequest,
    RateOrderRequest,
    UpdateStatusRequest,
)
from src.gm_order.application.service import OrderApplicationService

router = APIRouter(prefix="/orders", tags=["orders"])

_service = OrderApplicationService()


@router.post("", status_code=201)
async def create_order(
    body: CreateOrderRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_order(db, actor, body)
    resp = success_response(data.model_dump(mode="json"), message="Order placed")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_orders(
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status: OrderStatus | None = Query(None, description="Filter by order status"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await _service.list_orders(
        db, actor, status.value if status else None, cursor, limit
    )
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_order(db, actor, order_id)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.put("/{order_id}/status")
async def update_status(
    order_id: str,
    body: UpdateStatusRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_status(db, actor, order_id, body.status.value, body.notes)
    resp = success_response(data.model_dump(mode="json"), message="Order status updated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.put("/{order_id}/cancel")
async def cancel_order(
    order_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    body: CancelOrderRequest | None = None,
) -> ApiResponse:
    reason = body.reason if body is not None else None
    data = await _service.cancel_order(db, actor, order_id, reason)
    resp = success_response(data.model_dump(mode="json"), message="Order cancelled")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{order_id}/rate")
async def rate_order(
    order_id: str,
    body: RateOrderRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.rate(db, actor, order_id, body.rating, body.review)
    resp = success_response(data.model_dump(mode="json"), message="Rating saved")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
