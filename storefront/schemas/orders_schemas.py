from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.constants.order_status import OrderStatus, PaymentStatus
from storefront.schemas.address_schemas import ShippingAddress
from storefront.schemas.common import Money
from storefront.schemas.tracking_schemas import TrackingEntryRead


class OrderItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)


class PlaceOrderRequest(BaseModel):
    items: List[OrderItemCreate]
    shipping_address: ShippingAddress
    billing_address: Optional[ShippingAddress] = None
    payment_method: str
    discount: Decimal = Decimal("0")
    guest_email: Optional[str] = None
    guest_name: Optional[str] = None


class OrderItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: Optional[int] = None
    quantity: int
    unit_price: Money
    line_total: Money
    product_snapshot: dict


class OrderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_number: str
    user_id: Optional[int] = None
    guest_email: Optional[str] = None
    guest_name: Optional[str] = None
    subtotal: Money
    tax: Money
    shipping: Money
    discount: Money
    total: Money
    status: str
    payment_status: str
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    gateway_order_id: Optional[str] = None
    shipping_address: Optional[dict] = None
    billing_address: Optional[dict] = None
    shipping_zone_id: Optional[str] = None
    tracking_number: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    version: int
    created_at: datetime
    updated_at: datetime


class OrderDetail(OrderRead):
    items: List[OrderItemRead] = []
    tracking_history: List[TrackingEntryRead] = []


class OrderSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_number: str
    status: str
    payment_status: str
    total: Money
    created_at: datetime


class StatusUpdateRequest(BaseModel):
    status: OrderStatus
    # version the client last saw; a mismatch is a 409
    version: Optional[int] = None


class PaymentStatusUpdateRequest(BaseModel):
    payment_status: PaymentStatus
    version: Optional[int] = None


class TrackingNumberUpdate(BaseModel):
    tracking_number: str = Field(min_length=1)
    version: Optional[int] = None


class StatusChangeResponse(BaseModel):
    changed: bool
    message: str
    order: OrderRead
    tracking_entry: Optional[TrackingEntryRead] = None
