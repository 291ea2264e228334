from enum import Enum


class OrderStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"
    refunded = "refunded"


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"
    refunded = "refunded"


# forward happy path; position decides which moves go "forward"
FULFILMENT_PATH = [
    OrderStatus.pending,
    OrderStatus.confirmed,
    OrderStatus.processing,
    OrderStatus.shipped,
    OrderStatus.delivered,
]

TERMINAL_STATUSES = {
    OrderStatus.delivered,
    OrderStatus.cancelled,
    OrderStatus.refunded,
}

# statuses at or past handover to the courier
SHIPPED_OR_LATER = {OrderStatus.shipped, OrderStatus.delivered}


def _forward_targets(status: OrderStatus):
    position = FULFILMENT_PATH.index(status)
    return FULFILMENT_PATH[position + 1:] + [
        OrderStatus.cancelled,
        OrderStatus.refunded,
    ]


ALLOWED_TRANSITIONS = {
    status: (
        [] if status in TERMINAL_STATUSES else _forward_targets(status)
    )
    for status in OrderStatus
}

ALLOWED_PAYMENT_TRANSITIONS = {
    PaymentStatus.pending: [PaymentStatus.paid, PaymentStatus.failed],
    PaymentStatus.paid: [PaymentStatus.refunded],
    PaymentStatus.failed: [],
    PaymentStatus.refunded: [],
}

STATUS_MESSAGES = {
    OrderStatus.pending: "Order has been placed",
    OrderStatus.confirmed: "Order has been confirmed",
    OrderStatus.processing: "Order is being processed",
    OrderStatus.shipped: "Order has been shipped",
    OrderStatus.delivered: "Order has been delivered",
    OrderStatus.cancelled: "Order has been cancelled",
    OrderStatus.refunded: "Order has been refunded",
}
