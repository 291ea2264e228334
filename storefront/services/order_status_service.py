# storefront/services/order_status_service.py
"""
Order status and payment-status state machines.

The two machines are independent: cancelling an order never touches
payment_status, and a payment change never writes a tracking entry.
Each accepted order status change is written together with exactly one
tracking entry in a single transaction.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session, select

from storefront.constants.order_status import (
    ALLOWED_PAYMENT_TRANSITIONS,
    ALLOWED_TRANSITIONS,
    SHIPPED_OR_LATER,
    TERMINAL_STATUSES,
    OrderStatus,
    PaymentStatus,
)
from storefront.errors import (
    InvalidTransitionError,
    OrderNotFoundError,
    PersistenceConflictError,
    ValidationError,
)
from storefront.models.order import Order
from storefront.models.order_tracking import OrderTrackingEntry
from storefront.services.order_tracking_service import record_transition
from storefront.utils.clock import utc_now

logger = logging.getLogger(__name__)


@dataclass
class StatusChange:
    order: Order
    changed: bool
    tracking_entry: Optional[OrderTrackingEntry] = None


def _coerce(enum_cls, value, field: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field} '{value}'. Expected one of: {allowed}", field=field)


def lock_order(session: Session, order: Order, expected_version: Optional[int]) -> Order:
    """Reload the persisted row (row-locked where supported) over the caller's copy."""
    current = session.exec(
        select(Order)
        .where(Order.id == order.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).first()

    if current is None:
        raise OrderNotFoundError(order.id)
    if expected_version is not None and current.version != expected_version:
        raise PersistenceConflictError(order.id)
    return current


def guarded_update(session: Session, order: Order, values: dict):
    # compare-and-set on version covers backends without row locks
    result = session.exec(
        update(Order)
        .where(Order.id == order.id, Order.version == order.version)
        .values(version=order.version + 1, **values)
    )
    if result.rowcount != 1:
        raise PersistenceConflictError(order.id)


def apply_status_change(
    session: Session,
    order: Order,
    new_status,
    actor_id: Optional[int] = None,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
) -> StatusChange:
    target = _coerce(OrderStatus, new_status, "status")
    now = now or utc_now()

    try:
        order = lock_order(session, order, expected_version)
        current = OrderStatus(order.status)

        if current in TERMINAL_STATUSES:
            raise InvalidTransitionError(current.value, target.value)

        if target == current:
            # nothing written; commit only ends the transaction holding the row lock
            session.commit()
            return StatusChange(order=order, changed=False)

        if target not in ALLOWED_TRANSITIONS[current]:
            raise InvalidTransitionError(current.value, target.value)

        values = {"status": target.value, "updated_at": now}
        if target in SHIPPED_OR_LATER and order.shipped_at is None:
            values["shipped_at"] = now
        if target == OrderStatus.delivered and order.delivered_at is None:
            values["delivered_at"] = now

        guarded_update(session, order, values)
        entry = record_transition(session, order, target.value, actor_id=actor_id, now=now)
        session.commit()
    except InvalidTransitionError as e:
        session.rollback()
        logger.warning(f"Rejected status change on order {order.id}: {e}")
        raise
    except PersistenceConflictError:
        session.rollback()
        logger.warning(f"Concurrent update detected on order {order.id}")
        raise
    except Exception:
        session.rollback()
        raise

    session.refresh(order)
    session.refresh(entry)
    logger.info(
        f"Order {order.order_number} moved {current.value} -> {target.value}"
    )
    return StatusChange(order=order, changed=True, tracking_entry=entry)


def apply_payment_status_change(
    session: Session,
    order: Order,
    new_payment_status,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
    payment_reference: Optional[str] = None,
) -> StatusChange:
    target = _coerce(PaymentStatus, new_payment_status, "payment_status")
    now = now or utc_now()

    try:
        order = lock_order(session, order, expected_version)
        current = PaymentStatus(order.payment_status)

        if not ALLOWED_PAYMENT_TRANSITIONS[current]:
            raise InvalidTransitionError(current.value, target.value, field="payment_status")

        if target == current:
            session.commit()
            return StatusChange(order=order, changed=False)

        if target not in ALLOWED_PAYMENT_TRANSITIONS[current]:
            raise InvalidTransitionError(current.value, target.value, field="payment_status")

        values = {"payment_status": target.value, "updated_at": now}
        if payment_reference:
            values["payment_reference"] = payment_reference

        guarded_update(session, order, values)
        session.commit()
    except InvalidTransitionError as e:
        session.rollback()
        logger.warning(f"Rejected payment status change on order {order.id}: {e}")
        raise
    except Exception:
        session.rollback()
        raise

    session.refresh(order)
    logger.info(
        f"Order {order.order_number} payment {current.value} -> {target.value}"
    )
    return StatusChange(order=order, changed=True)
