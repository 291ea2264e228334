# storefront/services/order_tracking_service.py

import logging
from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, select

from storefront.constants.order_status import OrderStatus, STATUS_MESSAGES
from storefront.models.order import Order
from storefront.models.order_tracking import OrderTrackingEntry
from storefront.schemas.tracking_schemas import TrackingMeta
from storefront.utils.clock import utc_now

logger = logging.getLogger(__name__)


def _latest_entry(session: Session, order_id: int) -> Optional[OrderTrackingEntry]:
    return session.exec(
        select(OrderTrackingEntry)
        .where(OrderTrackingEntry.order_id == order_id)
        .order_by(OrderTrackingEntry.created_at.desc(), OrderTrackingEntry.id.desc())
    ).first()


def _append(
    session: Session,
    order: Order,
    status: str,
    message: str,
    actor_id: Optional[int],
    now: Optional[datetime],
    location: Optional[str] = None,
    meta: Optional[TrackingMeta] = None,
) -> OrderTrackingEntry:
    created_at = now or utc_now()

    # never step back behind the newest entry, even if the clock does
    latest = _latest_entry(session, order.id)
    if latest is not None and latest.created_at > created_at:
        created_at = latest.created_at

    entry = OrderTrackingEntry(
        order_id=order.id,
        status=status,
        message=message,
        location=location,
        meta=meta.as_json() if meta else None,
        created_by=actor_id,
        created_at=created_at,
        updated_at=created_at,
    )

    session.add(entry)
    # flush so a storage failure surfaces inside the caller's transaction
    session.flush()
    return entry


def record_transition(
    session: Session,
    order: Order,
    new_status: str,
    actor_id: Optional[int] = None,
    now: Optional[datetime] = None,
    location: Optional[str] = None,
    meta: Optional[TrackingMeta] = None,
) -> OrderTrackingEntry:
    """
    Append-only timeline entry for a status change.

    Does not commit: the caller owns the transaction so that the status
    update and its entry land together or not at all.
    """
    status = OrderStatus(new_status)
    return _append(
        session,
        order,
        status=status.value,
        message=STATUS_MESSAGES[status],
        actor_id=actor_id,
        now=now,
        location=location,
        meta=meta,
    )


def add_note(
    session: Session,
    order: Order,
    message: str,
    location: Optional[str] = None,
    meta: Optional[TrackingMeta] = None,
    actor_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> OrderTrackingEntry:
    """Operator annotation; labelled with the current status, which it leaves alone."""
    try:
        entry = _append(
            session,
            order,
            status=order.status,
            message=message,
            actor_id=actor_id,
            now=now,
            location=location,
            meta=meta,
        )
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(entry)
    logger.info(f"Tracking note added to order {order.order_number}")
    return entry


def get_tracking_history(session: Session, order_id: int) -> List[OrderTrackingEntry]:
    return session.exec(
        select(OrderTrackingEntry)
        .where(OrderTrackingEntry.order_id == order_id)
        .order_by(OrderTrackingEntry.created_at.asc(), OrderTrackingEntry.id.asc())
    ).all()
