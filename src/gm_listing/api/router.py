"""gm_listing REST endpoints.

POST   /listings               farmer creates a listing (pending review)
GET    /listings/{listing_id}  detail
DELETE /listings/{listing_id}  owner or admin; refused while orders are open
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.gm_common.actor import Actor
from src.gm_common.database import get_db_session
from src.gm_common.response import ApiResponse, success_response
from src.gm_gateway.auth.dependencies import get_current_actor
from src.gm_listing.application.schemas import CreateListingRequest
from src.gm_listing.application.service import ListingApplicationService

router = APIRouter(prefix="/listings", tags=["listings"])

_service = ListingApplicationService()


@router.post("", status_code=201)
async def create_listing(
    body: CreateListingRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_listing(db, actor, body)
    resp = success_response(data.model_dump(mode="json"), message="Listing created")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{listing_id}")
async def get_listing(
    listing_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_listing(db, listing_id)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/{listing_id}")
async def delete_listing(
    listing_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.delete_listing(db, actor, listing_id)
    resp = success_response(data.model_dump(mode="json"), message="Listing deleted")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
