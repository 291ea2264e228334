from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal

from storefront.utils.clock import utc_now

if TYPE_CHECKING:
    from storefront.models.order import Order


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="orders.id", index=True, ondelete="CASCADE")
    # the catalog row may be purged later; the snapshot below stays authoritative
    product_id: Optional[int] = Field(
        default=None, foreign_key="products.id", ondelete="SET NULL"
    )

    quantity: int
    unit_price: Decimal = Field(max_digits=10, decimal_places=2)
    line_total: Decimal = Field(max_digits=10, decimal_places=2)
    product_snapshot: dict = Field(default_factory=dict, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utc_now)

    order: Optional["Order"] = Relationship(back_populates="items")
