"""create_purchase_invoices

Revision ID: 4c1d2e3f5a6b
Revises:
Create Date: 2026-10-18 09:12:40.118362

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4c1d2e3f5a6b"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "purchase_invoices",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("invoice_number", sa.String(64), nullable=True),
        sa.Column("bill_type", sa.String(10), nullable=False),
        sa.Column("purchase_order_id", sa.Integer, nullable=True),
        sa.Column("order_number", sa.String(64), nullable=True),
        sa.Column("supplier_id", sa.Integer, nullable=True),
        sa.Column("supplier_name", sa.String(255), nullable=True),
        sa.Column("invoice_date", sa.String(10), nullable=True),
        sa.Column("due_date", sa.String(10), nullable=True),
        sa.Column("invoice_amount", sa.Numeric(15, 3), nullable=True),
        sa.Column("paid_amount", sa.Numeric(15, 3), nullable=True),
        sa.Column("balance_due", sa.Numeric(15, 3), nullable=True),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="unpaid"),
        sa.Column("covers_company_bills", sa.Text, nullable=True),
        sa.Column("covers_purchase_orders", sa.Text, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("project_id", sa.Integer, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_purchase_invoices_bill_type", "purchase_invoices", ["bill_type"])
    op.create_index("ix_purchase_invoices_purchase_order_id", "purchase_invoices", ["purchase_order_id"])

    op.create_table(
        "bill_payments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "bill_id",
            sa.Integer,
            sa.ForeignKey("purchase_invoices.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(15, 3), nullable=False),
        sa.Column("payment_method", sa.String(20), nullable=False),
        sa.Column("reference", sa.String(255), nullable=False, server_default=""),
        sa.Column("payment_date", sa.String(10), nullable=False),
        sa.Column("notes", sa.Text, nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_bill_payments_bill_id", "bill_payments", ["bill_id"])


def downgrade() -> None:
    op.drop_index("ix_bill_payments_bill_id", table_name="bill_payments")
    op.drop_table("bill_payments")
    op.drop_index("ix_purchase_invoices_purchase_order_id", table_name="purchase_invoices")
    op.drop_index("ix_purchase_invoices_bill_type", table_name="purchase_invoices")
    op.drop_table("purchase_invoices")
