from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from storefront.database import get_session
from storefront.dependencies.admin import ensure_order_access, require_admin
from storefront.dependencies.site import get_site_config, get_zones
from storefront.models.order import Order
from storefront.models.user import User
from storefront.schemas.orders_schemas import (
    OrderDetail,
    OrderItemRead,
    OrderRead,
    OrderSummary,
    PaymentStatusUpdateRequest,
    PlaceOrderRequest,
    StatusChangeResponse,
    StatusUpdateRequest,
    TrackingNumberUpdate,
)
from storefront.schemas.settings_schemas import SiteConfig
from storefront.schemas.tracking_schemas import TrackingEntryRead, TrackingNoteCreate
from storefront.services.order_service import (
    cancel_customer_order,
    customer_orders_query,
    find_guest_order,
    get_order,
    get_order_items,
    place_order,
    set_tracking_number,
)
from storefront.services.order_status_service import (
    apply_payment_status_change,
    apply_status_change,
)
from storefront.services.order_tracking_service import add_note, get_tracking_history
from storefront.utils.pagination import paginate
from storefront.utils.token import get_current_user, get_optional_user

router = APIRouter()


def order_detail(session: Session, order: Order) -> OrderDetail:
    return OrderDetail(
        **OrderRead.model_validate(order).model_dump(),
        items=[OrderItemRead.model_validate(i) for i in get_order_items(session, order.id)],
        tracking_history=[
            TrackingEntryRead.model_validate(e)
            for e in get_tracking_history(session, order.id)
        ],
    )


@router.post("", response_model=OrderDetail, status_code=201)
def create_order(
    data: PlaceOrderRequest,
    session: Session = Depends(get_session),
    site_config: SiteConfig = Depends(get_site_config),
    zones=Depends(get_zones),
    current_user: Optional[User] = Depends(get_optional_user),
):
    order = place_order(session, data, site_config, zones, user=current_user)
    return order_detail(session, order)


@router.get("")
def list_my_orders(
    page: int = 1,
    limit: int = 10,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return paginate(
        session=session,
        query=customer_orders_query(current_user.id),
        page=page,
        limit=limit,
        serialize=lambda o: OrderSummary.model_validate(o).model_dump(mode="json"),
    )


@router.get("/track/{order_number}", response_model=OrderDetail)
def track_guest_order(
    order_number: str,
    email: str = Query(..., min_length=3),
    session: Session = Depends(get_session),
):
    order = find_guest_order(session, order_number, email)
    return order_detail(session, order)


@router.get("/{order_id}", response_model=OrderDetail)
def read_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    order = get_order(session, order_id)
    ensure_order_access(order, current_user)
    return order_detail(session, order)


@router.get("/{order_id}/tracking", response_model=List[TrackingEntryRead])
def read_tracking(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    order = get_order(session, order_id)
    ensure_order_access(order, current_user)
    return get_tracking_history(session, order.id)


@router.patch("/{order_id}/status", response_model=StatusChangeResponse)
def update_status(
    order_id: int,
    data: StatusUpdateRequest,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    order = get_order(session, order_id)
    change = apply_status_change(
        session,
        order,
        data.status,
        actor_id=admin.id,
        expected_version=data.version,
    )

    return StatusChangeResponse(
        changed=change.changed,
        message=(
            f"Order status updated to {change.order.status}"
            if change.changed
            else f"Order is already {change.order.status}"
        ),
        order=OrderRead.model_validate(change.order),
        tracking_entry=(
            TrackingEntryRead.model_validate(change.tracking_entry)
            if change.tracking_entry
            else None
        ),
    )


@router.patch("/{order_id}/payment-status", response_model=StatusChangeResponse)
def update_payment_status(
    order_id: int,
    data: PaymentStatusUpdateRequest,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin),
):
    order = get_order(session, order_id)
    change = apply_payment_status_change(
        session, order, data.payment_status, expected_version=data.version
    )

    return StatusChangeResponse(
        changed=change.changed,
        message=(
            f"Payment status updated to {change.order.payment_status}"
            if change.changed
            else f"Payment is already {change.order.payment_status}"
        ),
        order=OrderRead.model_validate(change.order),
    )


@router.patch("/{order_id}/tracking-number", response_model=OrderRead)
def update_tracking_number(
    order_id: int,
    data: TrackingNumberUpdate,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin),
):
    order = get_order(session, order_id)
    return set_tracking_number(
        session, order, data.tracking_number, expected_version=data.version
    )


@router.post("/{order_id}/notes", response_model=TrackingEntryRead, status_code=201)
def create_note(
    order_id: int,
    data: TrackingNoteCreate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    order = get_order(session, order_id)
    return add_note(
        session,
        order,
        data.message,
        location=data.location,
        meta=data.meta,
        actor_id=admin.id,
    )


@router.post("/{order_id}/cancel", response_model=StatusChangeResponse)
def cancel_my_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    order = get_order(session, order_id)
    if order.user_id != current_user.id:
        raise HTTPException(404, "Order not found")

    change = cancel_customer_order(session, order, current_user)

    return StatusChangeResponse(
        changed=change.changed,
        message="Order cancelled successfully",
        order=OrderRead.model_validate(change.order),
        tracking_entry=TrackingEntryRead.model_validate(change.tracking_entry),
    )
