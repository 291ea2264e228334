# storefront/services/payment_service.py

import logging

from sqlmodel import Session

from storefront.config import settings
from storefront.constants.order_status import TERMINAL_STATUSES, OrderStatus, PaymentStatus
from storefront.errors import PaymentVerificationError, ValidationError
from storefront.models.order import Order
from storefront.schemas.payment_schemas import PaymentVerifySchema
from storefront.services.order_status_service import (
    StatusChange,
    apply_payment_status_change,
    guarded_update,
    lock_order,
)
from storefront.utils.clock import utc_now
from storefront.utils.money import round_money, to_decimal

logger = logging.getLogger(__name__)


class RazorpayGateway:
    """Razorpay SDK wrapper: order creation and checkout signature checks."""

    def __init__(self, key_id: str, key_secret: str):
        import razorpay

        self.key_id = key_id
        self._errors = razorpay.errors
        self.client = razorpay.Client(auth=(key_id, key_secret))

    def create_order(self, amount: int, currency: str, receipt: str, notes: dict) -> dict:
        return self.client.order.create({
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes,
        })

    def verify(self, razorpay_order_id: str, razorpay_payment_id: str, signature: str) -> bool:
        try:
            self.client.utility.verify_payment_signature({
                "razorpay_order_id": razorpay_order_id,
                "razorpay_payment_id": razorpay_payment_id,
                "razorpay_signature": signature,
            })
        except self._errors.SignatureVerificationError:
            return False
        return True


def get_payment_gateway() -> RazorpayGateway:
    return RazorpayGateway(settings.razorpay_key_id, settings.razorpay_key_secret)


def amount_in_paise(order: Order) -> int:
    return int(round_money(to_decimal(order.total)) * 100)


def create_gateway_order(
    session: Session,
    order: Order,
    gateway,
    currency: str,
) -> Order:
    """
    Open the Razorpay order a checkout pays against.

    Reuses the existing gateway order when one was already created.
    """
    if order.payment_status != PaymentStatus.pending.value:
        raise ValidationError("Order is not awaiting payment", field="payment_status")
    if OrderStatus(order.status) in TERMINAL_STATUSES:
        raise ValidationError(f"Order is {order.status}", field="status")
    if order.gateway_order_id:
        return order

    gateway_order = gateway.create_order(
        amount=amount_in_paise(order),
        currency=currency,
        receipt=order.order_number,
        notes={"order_id": str(order.id), "order_number": order.order_number},
    )

    try:
        order = lock_order(session, order, None)
        guarded_update(
            session,
            order,
            {"gateway_order_id": gateway_order["id"], "updated_at": utc_now()},
        )
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(order)
    logger.info(f"Razorpay order {order.gateway_order_id} created for {order.order_number}")
    return order


def verify_payment(
    session: Session,
    order: Order,
    payload: PaymentVerifySchema,
    gateway,
) -> StatusChange:
    """
    Mark an order paid once the gateway signature checks out.

    The signed Razorpay order must be the one created for this order.
    Repeating a verification for the same gateway payment is a no-op.
    """
    if (
        order.payment_status == PaymentStatus.paid.value
        and order.payment_reference == payload.razorpay_payment_id
    ):
        return StatusChange(order=order, changed=False)

    if order.payment_status == PaymentStatus.paid.value:
        raise PaymentVerificationError("Order is already paid", field="order_id")

    if not order.gateway_order_id:
        raise PaymentVerificationError(
            "Razorpay order not initialized", field="razorpay_order_id"
        )
    if order.gateway_order_id != payload.razorpay_order_id:
        logger.warning(f"Razorpay order mismatch for order {order.order_number}")
        raise PaymentVerificationError("Razorpay order mismatch", field="razorpay_order_id")

    if not gateway.verify(
        payload.razorpay_order_id,
        payload.razorpay_payment_id,
        payload.razorpay_signature,
    ):
        logger.warning(f"Invalid payment signature for order {order.order_number}")
        raise PaymentVerificationError(
            "Payment verification failed", field="razorpay_signature"
        )

    change = apply_payment_status_change(
        session,
        order,
        PaymentStatus.paid,
        payment_reference=payload.razorpay_payment_id,
    )
    logger.info(f"Payment {payload.razorpay_payment_id} verified for order {order.order_number}")
    return change
