"""003: create listings table

Revision ID: 003
Revises: 002
Create Date: 2026-09-14
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE listings (
            id                      VARCHAR(32)     PRIMARY KEY,
            seller_id               VARCHAR(64)     NOT NULL,
            title                   VARCHAR(100)    NOT NULL,
            grain_type              VARCHAR(20)     NOT NULL,
            description             TEXT            NOT NULL,
            total_quantity          NUMERIC(12, 2)  NOT NULL,
            available_quantity      NUMERIC(12, 2)  NOT NULL,
            price_per_unit          NUMERIC(12, 2)  NOT NULL,
            minimum_order_quantity  NUMERIC(12, 2)  NOT NULL DEFAULT 1,
            status                  VARCHAR(20)     NOT NULL DEFAULT 'pending',
            expires_at              TIMESTAMPTZ     NOT NULL,
            admin_notes             VARCHAR(500),
            approved_by             VARCHAR(64),
            approved_at             TIMESTAMPTZ,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_listings_total_positive   CHECK (total_quantity > 0),
            CONSTRAINT ck_listings_available_range  CHECK (
                available_quantity >= 0 AND available_quantity <= total_quantity
            ),
            CONSTRAINT ck_listings_price_positive   CHECK (price_per_unit > 0),
            CONSTRAINT ck_listings_min_order        CHECK (
                minimum_order_quantity > 0 AND minimum_order_quantity <= total_quantity
            ),
            CONSTRAINT ck_listings_grain_type       CHECK (
                grain_type IN ('wheat', 'rice', 'corn', 'barley', 'millet',
                               'sorghum', 'oats', 'quinoa', 'other')
            ),
            CONSTRAINT ck_listings_status           CHECK (
                status IN ('pending', 'approved', 'rejected', 'sold', 'expired')
            )
        );
    """)
    op.execute("CREATE INDEX idx_listings_seller ON listings (seller_id, created_at DESC);")
    op.execute("""
        CREATE INDEX idx_listings_approved
        ON listings (grain_type, expires_at)
        WHERE status = 'approved';
    """)
    op.execute("""
        CREATE TRIGGER trg_listings_updated_at
            BEFORE UPDATE ON listings
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute(
        "COMMENT ON TABLE listings IS "
        "'Grain listings; available_quantity is written only by reserve/release';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS listings CASCADE;")
