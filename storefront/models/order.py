from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal

from storefront.constants.order_status import OrderStatus, PaymentStatus
from storefront.utils.clock import utc_now

if TYPE_CHECKING:
    from storefront.models.order_item import OrderItem


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_number: str = Field(index=True, unique=True)

    # guest checkout leaves user_id empty and fills the guest_* fields
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    guest_email: Optional[str] = Field(default=None, index=True)
    guest_name: Optional[str] = None

    subtotal: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    tax: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    shipping: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    discount: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    total: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)

    status: str = Field(default=OrderStatus.pending.value, index=True)
    payment_status: str = Field(default=PaymentStatus.pending.value, index=True)
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = Field(default=None, index=True)
    # Razorpay order created for this order; verification must match it
    gateway_order_id: Optional[str] = Field(default=None, index=True)

    # snapshots, never joined back to a live address row
    shipping_address: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    billing_address: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    shipping_zone_id: Optional[str] = None

    tracking_number: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    version: int = Field(default=1)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    items: List["OrderItem"] = Relationship(back_populates="order")
