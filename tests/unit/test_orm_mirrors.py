"""The ORM mirrors must agree with the repositories' raw SQL and the enums."""

import pytest
from sqlalchemy import CheckConstraint, Table

from src.gm_common.database import Base
from src.gm_common.enums import GrainType, ListingStatus, OrderStatus, Role
from src.gm_gateway.user.db_models import UserModel
from src.gm_listing.infrastructure import persistence as listing_sql
from src.gm_listing.infrastructure.db_models import InventoryReleaseORM, ListingORM
from src.gm_order.infrastructure import persistence as order_sql
from src.gm_order.infrastructure.db_models import OrderORM, OrderTimelineORM


def _columns(select_list: str) -> list[str]:
    return [c.strip() for c in select_list.split(",") if c.strip()]


def _check(table: Table, name: str) -> str:
    for constraint in table.constraints:
        if isinstance(constraint, CheckConstraint) and constraint.name == name:
            return str(constraint.sqltext)
    raise AssertionError(f"{table.name} has no {name}")


def test_all_tables_registered() -> None:
    assert {"users", "listings", "inventory_releases", "orders", "order_timeline"} <= set(
        Base.metadata.tables
    )


@pytest.mark.parametrize(
    ("table", "select_list"),
    [
        (ListingORM.__table__, listing_sql._COLUMNS),
        (OrderORM.__table__, order_sql._SELECT_COLUMNS),
    ],
)
def test_repository_selects_every_mapped_column(table: Table, select_list: str) -> None:
    assert _columns(select_list) == [c.name for c in table.columns]


@pytest.mark.parametrize(
    ("table", "name", "enum"),
    [
        (ListingORM.__table__, "ck_listings_status", ListingStatus),
        (ListingORM.__table__, "ck_listings_grain_type", GrainType),
        (OrderORM.__table__, "ck_orders_status", OrderStatus),
        (UserModel.__table__, "ck_users_role", Role),
    ],
)
def test_status_checks_cover_every_enum_value(table: Table, name: str, enum: type) -> None:
    sql = _check(table, name)
    for member in enum:
        assert f"'{member.value}'" in sql


def test_release_is_keyed_on_order() -> None:
    assert [c.name for c in InventoryReleaseORM.__table__.primary_key] == ["order_id"]


def test_timeline_sequence_unique_per_order() -> None:
    uniques = [
        tuple(c.name for c in constraint.columns)
        for constraint in OrderTimelineORM.__table__.constraints
        if constraint.name == "uq_order_timeline_seq"
    ]
    assert uniques == [("order_id", "seq")]
