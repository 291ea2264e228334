# -------- ADMIN ORDERS --------
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from storefront.constants.order_status import OrderStatus, PaymentStatus
from storefront.database import get_session
from storefront.dependencies.admin import require_admin
from storefront.models.user import User
from storefront.schemas.orders_schemas import OrderSummary
from storefront.services.order_service import search_orders_query
from storefront.utils.pagination import paginate

router = APIRouter()


@router.get("")
def list_orders(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    status: Optional[OrderStatus] = Query(None),
    payment_status: Optional[PaymentStatus] = Query(None),
    session: Session = Depends(get_session),
    _: User = Depends(require_admin),
):
    query = search_orders_query(
        status=status.value if status else None,
        payment_status=payment_status.value if payment_status else None,
        search=search,
    )

    return paginate(
        session=session,
        query=query,
        page=page,
        limit=limit,
        serialize=lambda o: OrderSummary.model_validate(o).model_dump(mode="json"),
    )
