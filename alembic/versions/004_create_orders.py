"""004: create orders table

Revision ID: 004
Revises: 003
Create Date: 2026-09-14
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id                      VARCHAR(32)     PRIMARY KEY,
            buyer_id                VARCHAR(64)     NOT NULL,
            seller_id               VARCHAR(64)     NOT NULL,
            listing_id              VARCHAR(32)     NOT NULL,
            quantity                NUMERIC(12, 2)  NOT NULL,
            price_per_unit          NUMERIC(12, 2)  NOT NULL,
            total_amount            NUMERIC(14, 2)  NOT NULL,
            commission_percentage   NUMERIC(5, 2)   NOT NULL DEFAULT 5,
            commission_amount       NUMERIC(14, 2)  NOT NULL,
            payment_method          VARCHAR(20)     NOT NULL,
            payment_status          VARCHAR(20)     NOT NULL DEFAULT 'pending',
            delivery_type           VARCHAR(20)     NOT NULL DEFAULT 'farmer_delivery',
            address_name            VARCHAR(100)    NOT NULL,
            address_phone           VARCHAR(15)     NOT NULL,
            address_street          VARCHAR(200)    NOT NULL,
            address_city            VARCHAR(100)    NOT NULL,
            address_state           VARCHAR(100)    NOT NULL,
            address_pincode         VARCHAR(6)      NOT NULL,
            status                  VARCHAR(20)     NOT NULL DEFAULT 'pending',
            estimated_delivery_date TIMESTAMPTZ,
            actual_delivery_date    TIMESTAMPTZ,
            cancellation_reason     VARCHAR(200),
            refund_amount           NUMERIC(14, 2),
            refund_date             TIMESTAMPTZ,
            notes_buyer             VARCHAR(500),
            notes_farmer            VARCHAR(500),
            notes_admin             VARCHAR(500),
            buyer_rating_stars      SMALLINT,
            buyer_rating_review     VARCHAR(500),
            buyer_rating_at         TIMESTAMPTZ,
            seller_rating_stars     SMALLINT,
            seller_rating_review    VARCHAR(500),
            seller_rating_at        TIMESTAMPTZ,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_quantity_positive  CHECK (quantity > 0),
            CONSTRAINT ck_orders_total              CHECK (total_amount >= 0),
            CONSTRAINT ck_orders_commission         CHECK (
                commission_amount >= 0 AND commission_amount <= total_amount
            ),
            CONSTRAINT ck_orders_payment_method     CHECK (
                payment_method IN ('cash_on_delivery', 'bank_transfer', 'upi', 'card')
            ),
            CONSTRAINT ck_orders_payment_status     CHECK (
                payment_status IN ('pending', 'paid', 'failed', 'refunded')
            ),
            CONSTRAINT ck_orders_delivery_type      CHECK (
                delivery_type IN ('farmer_delivery', 'buyer_pickup', 'third_party')
            ),
            CONSTRAINT ck_orders_status             CHECK (
                status IN ('pending', 'confirmed', 'paid', 'shipped',
                           'delivered', 'cancelled', 'refunded')
            ),
            CONSTRAINT ck_orders_buyer_rating       CHECK (buyer_rating_stars BETWEEN 1 AND 5),
            CONSTRAINT ck_orders_seller_rating      CHECK (seller_rating_stars BETWEEN 1 AND 5)
        );
    """)
    op.execute("CREATE INDEX idx_orders_buyer ON orders (buyer_id, id DESC);")
    op.execute("CREATE INDEX idx_orders_seller ON orders (seller_id, id DESC);")
    op.execute("""
        CREATE INDEX idx_orders_listing_active
        ON orders (listing_id)
        WHERE status IN ('pending', 'confirmed', 'paid', 'shipped');
    """)
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE orders IS 'Buyer orders against listings; never deleted';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
