"""add gateway order id to orders

Revision ID: 8b2e4d61c5a3
Revises: 3f1c9a7d2b10
Create Date: 2026-10-20 09:41:07.552310

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '8b2e4d61c5a3'
down_revision: Union[str, Sequence[str], None] = '3f1c9a7d2b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.add_column("orders", sa.Column("gateway_order_id", sa.String(), nullable=True))
    op.create_index("ix_orders_gateway_order_id", "orders", ["gateway_order_id"])


def downgrade():
    op.drop_index("ix_orders_gateway_order_id", table_name="orders")
    op.drop_column("orders", "gateway_order_id")
