# storefront/services/order_service.py

import logging
import secrets
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy import func, or_
from sqlmodel import Session, select

from storefront.constants.order_status import OrderStatus
from storefront.errors import (
    InvalidTransitionError,
    OrderNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from storefront.models.order import Order
from storefront.models.order_item import OrderItem
from storefront.models.product import Product
from storefront.models.user import User
from storefront.schemas.orders_schemas import PlaceOrderRequest
from storefront.schemas.settings_schemas import SiteConfig
from storefront.schemas.shipping_schemas import ShippingZone
from storefront.services.inventory_service import reserve_stock
from storefront.services.order_status_service import (
    StatusChange,
    apply_status_change,
    guarded_update,
    lock_order,
)
from storefront.services.order_tracking_service import record_transition
from storefront.services.shipping_service import (
    calculate_shipping,
    parse_amount,
    validate_address,
)
from storefront.utils.clock import utc_now
from storefront.utils.money import round_money, to_decimal

logger = logging.getLogger(__name__)


def generate_order_number(now: Optional[datetime] = None) -> str:
    now = now or utc_now()
    return f"ORD-{now:%Y%m%d}-{secrets.token_hex(4).upper()}"


def product_snapshot(product: Product) -> dict:
    """Frozen copy of the catalog fields shown on an order line."""
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": float(round_money(to_decimal(product.price))),
        "images": list(product.images or []),
        "sku": product.sku,
        "category_id": product.category_id,
        "seller_id": product.seller_id,
    }


def place_order(
    session: Session,
    payload: PlaceOrderRequest,
    site_config: SiteConfig,
    zones: Optional[Sequence[ShippingZone]] = None,
    user: Optional[User] = None,
    now: Optional[datetime] = None,
) -> Order:
    """
    Create an order with its lines and its first tracking entry.

    Prices are read from the catalog once, here, and never refreshed.
    Order, items, stock and the initial `pending` entry commit together.
    """
    if not payload.items:
        raise ValidationError("Order must contain at least one item", field="items")

    if user is None and not (payload.guest_email and payload.guest_name):
        raise ValidationError(
            "Guest checkout requires guest_email and guest_name", field="guest_email"
        )

    address_errors = validate_address(payload.shipping_address)
    if address_errors:
        raise ValidationError("; ".join(address_errors), field="shipping_address")

    now = now or utc_now()

    lines = []
    subtotal = Decimal("0")
    for item in payload.items:
        product = session.get(Product, item.product_id)
        if product is None:
            raise ProductNotFoundError(item.product_id)

        unit_price = to_decimal(product.price)
        line_total = unit_price * item.quantity
        subtotal += line_total
        lines.append((product, item.quantity, unit_price, line_total))

    discount = parse_amount(payload.discount, field="discount")
    if discount > subtotal:
        raise ValidationError("Discount cannot exceed the subtotal", field="discount")

    # NotServiceableError here blocks placement
    calc = calculate_shipping(payload.shipping_address, subtotal, zones, now)
    tax = subtotal * to_decimal(site_config.tax_rate)

    subtotal = round_money(subtotal)
    tax = round_money(tax)
    shipping = round_money(calc.shipping_cost)
    discount = round_money(discount)

    billing = payload.billing_address or payload.shipping_address

    order = Order(
        order_number=generate_order_number(now),
        user_id=user.id if user else None,
        guest_email=None if user else payload.guest_email,
        guest_name=None if user else payload.guest_name,
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        discount=discount,
        total=subtotal + tax + shipping - discount,
        status=OrderStatus.pending.value,
        payment_method=payload.payment_method,
        shipping_address=payload.shipping_address.snapshot(),
        billing_address=billing.snapshot(),
        shipping_zone_id=calc.zone.id,
        created_at=now,
        updated_at=now,
    )

    try:
        session.add(order)
        session.flush()

        for product, quantity, unit_price, line_total in lines:
            reserve_stock(session, product, quantity)
            session.add(
                OrderItem(
                    order_id=order.id,
                    product_id=product.id,
                    quantity=quantity,
                    unit_price=round_money(unit_price),
                    line_total=round_money(line_total),
                    product_snapshot=product_snapshot(product),
                    created_at=now,
                )
            )

        record_transition(
            session,
            order,
            OrderStatus.pending.value,
            actor_id=user.id if user else None,
            now=now,
        )
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(order)
    logger.info(f"Order {order.order_number} placed, total {order.total}")
    return order


def get_order(session: Session, order_id: int) -> Order:
    order = session.get(Order, order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    return order


def get_order_items(session: Session, order_id: int) -> List[OrderItem]:
    return session.exec(
        select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id)
    ).all()


def find_guest_order(session: Session, order_number: str, email: str) -> Order:
    """Order lookup for tracking without an account: number plus contact email."""
    email = email.strip().lower()
    result = session.exec(
        select(Order, User)
        .join(User, User.id == Order.user_id, isouter=True)
        .where(Order.order_number == order_number)
    ).first()

    if result:
        order, user = result
        contact = order.guest_email or (user.email if user else None)
        if contact and contact.strip().lower() == email:
            return order

    raise OrderNotFoundError(order_number)


def search_orders_query(
    status: Optional[str] = None,
    payment_status: Optional[str] = None,
    search: Optional[str] = None,
):
    query = select(Order)

    if status:
        query = query.where(Order.status == status)
    if payment_status:
        query = query.where(Order.payment_status == payment_status)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.where(
            or_(
                func.lower(Order.order_number).like(pattern),
                func.lower(Order.guest_email).like(pattern),
            )
        )

    return query.order_by(Order.created_at.desc(), Order.id.desc())


def customer_orders_query(user_id: int):
    return (
        select(Order)
        .where(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )


def cancel_customer_order(
    session: Session,
    order: Order,
    user: User,
    now: Optional[datetime] = None,
) -> StatusChange:
    """Customers may cancel their own orders while they are still pending."""
    if order.user_id != user.id:
        raise OrderNotFoundError(order.id)
    if order.status != OrderStatus.pending.value:
        raise InvalidTransitionError(order.status, OrderStatus.cancelled.value)

    # the version seen here guards against a confirm landing in between
    return apply_status_change(
        session,
        order,
        OrderStatus.cancelled,
        actor_id=user.id,
        now=now,
        expected_version=order.version,
    )


def set_tracking_number(
    session: Session,
    order: Order,
    tracking_number: str,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Order:
    """Carrier reference only; the status and the timeline are untouched."""
    try:
        order = lock_order(session, order, expected_version)
        guarded_update(
            session,
            order,
            {"tracking_number": tracking_number, "updated_at": now or utc_now()},
        )
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(order)
    logger.info(f"Tracking number set on order {order.order_number}")
    return order
