"""track last status poll per payment record

Revision ID: 0002_last_polled_at
Revises: 0001_payments
Create Date: 2026-10-20
"""

from alembic import op
import sqlalchemy as sa


revision = "0002_last_polled_at"
down_revision = "0001_payments"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        "payment_records",
        sa.Column("last_polled_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_payment_records_last_polled_at", "payment_records", ["last_polled_at"])


def downgrade() -> None:
    op.drop_index("ix_payment_records_last_polled_at", table_name="payment_records")
    op.drop_column("payment_records", "last_polled_at")
