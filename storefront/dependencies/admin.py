from fastapi import Depends, HTTPException, status

from storefront.models.order import Order
from storefront.models.user import User
from storefront.utils.token import get_current_user

ADMIN_ROLE = "admin"


def is_admin(user) -> bool:
    return user is not None and user.role == ADMIN_ROLE


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not is_admin(current_user):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Admin access required")
    return current_user


def ensure_order_access(order: Order, user: User):
    """Owners and admins only; 404 rather than 403 so order ids don't leak."""
    if is_admin(user):
        return
    if order.user_id is None or order.user_id != user.id:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Order not found")
