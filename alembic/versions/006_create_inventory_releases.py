"""006: create inventory_releases table

Revision ID: 006
Revises: 005
Create Date: 2026-09-14
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # One row per order whose quantity went back to its listing; the primary
    # key makes a second release for the same order a no-op.
    op.execute("""
        CREATE TABLE inventory_releases (
            order_id        VARCHAR(32)     PRIMARY KEY,
            listing_id      VARCHAR(32)     NOT NULL,
            quantity        NUMERIC(12, 2)  NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_inventory_releases_quantity CHECK (quantity > 0)
        );
    """)
    op.execute("CREATE INDEX idx_inventory_releases_listing ON inventory_releases (listing_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS inventory_releases CASCADE;")
