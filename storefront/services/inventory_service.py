# storefront/services/inventory_service.py
from sqlmodel import Session
import logging

from storefront.errors import ValidationError
from storefront.models.product import Product

logger = logging.getLogger(__name__)


def reserve_stock(session: Session, product: Product, quantity: int):
    """Decrement stock inside the caller's transaction; no commit here."""
    if product.stock < quantity:
        raise ValidationError(
            f"Insufficient stock for {product.name}. "
            f"Available: {product.stock}, Requested: {quantity}",
            field="items",
        )

    product.stock -= quantity
    session.add(product)
    logger.info(f"Reserved {quantity} of product {product.id}, stock now {product.stock}")
