"""Domain exceptions for the storefront order and shipping core."""

from typing import Optional


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    kind = "storefront_error"

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)

    def to_detail(self) -> dict:
        return {
            "detail": self.message,
            "error_type": self.kind,
            "field": self.field,
        }


class ValidationError(StorefrontError):
    """Raised when an address, amount or order payload is malformed."""

    kind = "validation_error"


class NotServiceableError(StorefrontError):
    """Raised when an address matches no configured shipping zone."""

    kind = "not_serviceable"

    def __init__(self, country: str, state: Optional[str] = None):
        self.country = country
        self.state = state
        super().__init__(
            "Sorry, we do not ship to this location yet.", field="country"
        )


class InvalidTransitionError(StorefrontError):
    """Raised when a status change violates the order state machine."""

    kind = "invalid_transition"

    def __init__(self, current: str, requested: str, field: str = "status"):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot change {field} from '{current}' to '{requested}'",
            field=field,
        )


class PersistenceConflictError(StorefrontError):
    """Raised when another writer changed the order first. Refetch and retry."""

    kind = "persistence_conflict"

    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(
            f"Order {order_id} was modified concurrently. Reload and retry.",
            field="version",
        )


class OrderNotFoundError(StorefrontError):
    kind = "order_not_found"

    def __init__(self, order_ref):
        self.order_ref = order_ref
        super().__init__(f"Order not found: {order_ref}", field="order_id")


class ProductNotFoundError(StorefrontError):
    kind = "product_not_found"

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}", field="product_id")


class ZoneNotFoundError(StorefrontError):
    kind = "zone_not_found"

    def __init__(self, zone_id: str):
        self.zone_id = zone_id
        super().__init__(f"Shipping zone not found: {zone_id}", field="zone_id")


class PaymentVerificationError(StorefrontError):
    """Raised when a gateway payment signature does not verify."""

    kind = "payment_verification_failed"
