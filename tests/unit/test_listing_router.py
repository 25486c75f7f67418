"""HTTP-level tests for /api/v1/listings and /api/v1/admin."""

from collections.abc import Callable
from decimal import Decimal

import pytest
from httpx import AsyncClient

from src.gm_admin.api import router as admin_router
from src.gm_admin.application.service import AdminService
from src.gm_common.actor import Actor
from src.gm_listing.api import router as listing_router
from src.gm_listing.application.service import ListingApplicationService
from tests.unit.fakes import (
    ADMIN,
    BUYER,
    FARMER,
    FakeListingRepository,
    FakeOrderRepository,
    RecordingNotifier,
    fake_email_lookup,
)

ActAs = Callable[[Actor], None]

_NEW_LISTING = {
    "title": "Desi chana",
    "grainType": "other",
    "description": "Bold grain, machine cleaned",
    "totalQuantity": "25",
    "pricePerUnit": "5400.00",
    "minimumOrderQuantity": "5",
}


@pytest.fixture(autouse=True)
def wired(
    monkeypatch: pytest.MonkeyPatch,
    listing_repo: FakeListingRepository,
    order_repo: FakeOrderRepository,
    notifier: RecordingNotifier,
) -> None:
    monkeypatch.setattr(listing_router, "_service", ListingApplicationService(listing_repo))
    monkeypatch.setattr(
        admin_router,
        "_service",
        AdminService(listing_repo, order_repo, notifier, email_lookup=fake_email_lookup),
    )


async def test_create_then_approve(
    client: AsyncClient, act_as: ActAs, notifier: RecordingNotifier
) -> None:
    act_as(FARMER)
    resp = await client.post("/api/v1/listings", json=_NEW_LISTING)
    assert resp.status_code == 201
    listing = resp.json()["data"]
    assert listing["status"] == "pending"
    assert listing["available_quantity"] == "25"

    act_as(ADMIN)
    resp = await client.put(
        f"/api/v1/admin/listings/{listing['id']}/approve", json={"adminNotes": "Sample ok"}
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "approved"
    assert notifier.sent[0][0] == "farmer-1@example.com"


async def test_reject_without_body(
    client: AsyncClient, act_as: ActAs, listing_repo: FakeListingRepository
) -> None:
    act_as(ADMIN)
    resp = await client.put("/api/v1/admin/listings/LST-1/reject")
    assert resp.status_code == 200
    assert listing_repo.listings["LST-1"].status == "rejected"


async def test_buyer_cannot_create_listing(client: AsyncClient, act_as: ActAs) -> None:
    act_as(BUYER)
    resp = await client.post("/api/v1/listings", json=_NEW_LISTING)
    assert resp.status_code == 403


async def test_non_admin_blocked_from_admin_routes(client: AsyncClient, act_as: ActAs) -> None:
    act_as(FARMER)
    resp = await client.put("/api/v1/admin/listings/LST-1/approve")
    assert resp.status_code == 403
    assert resp.json()["code"] == 1006


async def test_get_listing(client: AsyncClient, act_as: ActAs) -> None:
    act_as(BUYER)
    resp = await client.get("/api/v1/listings/LST-1")
    assert resp.status_code == 200
    assert resp.json()["data"]["price_per_unit"] == "2500.00"
    assert (await client.get("/api/v1/listings/LST-404")).status_code == 404


async def test_delete_blocked_by_open_orders(
    client: AsyncClient, act_as: ActAs, listing_repo: FakeListingRepository
) -> None:
    listing_repo.open_quantity["LST-1"] = Decimal("10")
    act_as(FARMER)
    resp = await client.delete("/api/v1/listings/LST-1")
    assert resp.status_code == 409
    assert resp.json()["code"] == 3005


async def test_inventory_check(
    client: AsyncClient, act_as: ActAs, listing_repo: FakeListingRepository
) -> None:
    act_as(ADMIN)
    resp = await client.get("/api/v1/admin/listings/LST-1/inventory")
    assert resp.status_code == 200
    assert resp.json()["data"]["consistent"] is True

    resp = await client.post("/api/v1/admin/listings/LST-1/inventory/reconcile")
    assert resp.status_code == 200
    assert resp.json()["data"]["orders_checked"] == 0
