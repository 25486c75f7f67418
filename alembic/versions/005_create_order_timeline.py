"""005: create order_timeline table

Revision ID: 005
Revises: 004
Create Date: 2026-09-14
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE order_timeline (
            id              BIGSERIAL       PRIMARY KEY,
            order_id        VARCHAR(32)     NOT NULL REFERENCES orders (id),
            seq             SMALLINT        NOT NULL,
            status          VARCHAR(20)     NOT NULL,
            description     VARCHAR(300)    NOT NULL,
            actor_id        VARCHAR(64),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_order_timeline_seq    UNIQUE (order_id, seq),
            CONSTRAINT ck_order_timeline_seq    CHECK (seq >= 0)
        );
    """)
    op.execute("COMMENT ON TABLE order_timeline IS 'Append-only status history per order';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS order_timeline CASCADE;")
