from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from storefront.database import get_session
from storefront.dependencies.admin import ensure_order_access
from storefront.dependencies.site import get_site_config
from storefront.models.order import Order
from storefront.models.user import User
from storefront.schemas.payment_schemas import (
    PaymentOrderCreate,
    PaymentOrderResponse,
    PaymentVerifyResponse,
    PaymentVerifySchema,
)
from storefront.schemas.settings_schemas import SiteConfig
from storefront.services.order_service import get_order
from storefront.services.payment_service import (
    amount_in_paise,
    create_gateway_order,
    get_payment_gateway,
    verify_payment,
)
from storefront.utils.token import get_optional_user

router = APIRouter()


def _payable_order(session: Session, order_id: int, current_user: Optional[User]) -> Order:
    order = get_order(session, order_id)

    # guest orders are paid by whoever holds the gateway order
    if order.user_id is not None:
        if current_user is None:
            raise HTTPException(404, "Order not found")
        ensure_order_access(order, current_user)
    return order


@router.post("/create-order", response_model=PaymentOrderResponse)
def create_order(
    payload: PaymentOrderCreate,
    session: Session = Depends(get_session),
    gateway=Depends(get_payment_gateway),
    site_config: SiteConfig = Depends(get_site_config),
    current_user: Optional[User] = Depends(get_optional_user),
):
    order = _payable_order(session, payload.order_id, current_user)
    order = create_gateway_order(session, order, gateway, site_config.currency_code)

    return PaymentOrderResponse(
        order_id=order.id,
        razorpay_order_id=order.gateway_order_id,
        amount=amount_in_paise(order),
        currency=site_config.currency_code,
        key_id=gateway.key_id,
    )


@router.post("/verify", response_model=PaymentVerifyResponse)
def verify(
    payload: PaymentVerifySchema,
    session: Session = Depends(get_session),
    gateway=Depends(get_payment_gateway),
    current_user: Optional[User] = Depends(get_optional_user),
):
    order = _payable_order(session, payload.order_id, current_user)
    change = verify_payment(session, order, payload, gateway)

    return PaymentVerifyResponse(
        verified=True,
        changed=change.changed,
        order_id=change.order.id,
        payment_status=change.order.payment_status,
    )
