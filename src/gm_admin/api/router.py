"""Admin REST API. Every endpoint requires an admin token."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.gm_admin.application.service import AdminService
from src.gm_common.actor import Actor
from src.gm_common.database import get_db_session
from src.gm_common.response import ApiResponse, success_response
from src.gm_gateway.auth.dependencies import require_admin
from src.gm_listing.application.schemas import ReviewListingRequest

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


@router.put("/listings/{listing_id}/approve")
async def approve_listing(
    listing_id: str,
    admin: Annotated[Actor, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    body: ReviewListingRequest | None = None,
) -> ApiResponse:
    notes = body.admin_notes if body else None
    data = await _service.approve_listing(db, admin, listing_id, notes)
    resp = success_response(data.model_dump(mode="json"), message="Listing approved")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.put("/listings/{listing_id}/reject")
async def reject_listing(
    listing_id: str,
    admin: Annotated[Actor, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    body: ReviewListingRequest | None = None,
) -> ApiResponse:
    notes = body.admin_notes if body else None
    data = await _service.reject_listing(db, admin, listing_id, notes)
    resp = success_response(data.model_dump(mode="json"), message="Listing rejected")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/listings/{listing_id}/inventory")
async def verify_listing_inventory(
    listing_id: str,
    admin: Annotated[Actor, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.verify_listing_inventory(db, listing_id)
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/listings/{listing_id}/inventory/reconcile")
async def reconcile_listing_inventory(
    listing_id: str,
    admin: Annotated[Actor, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.reconcile_listing_inventory(db, listing_id)
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
