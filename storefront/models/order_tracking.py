from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON

from storefront.utils.clock import utc_now


class OrderTrackingEntry(SQLModel, table=True):
    __tablename__ = "order_tracking"

    # autoincrement id doubles as the tie-breaker for equal created_at values
    id: Optional[int] = Field(default=None, primary_key=True)

    order_id: int = Field(foreign_key="orders.id", index=True, ondelete="CASCADE")
    status: str = Field(index=True)

    message: str
    location: Optional[str] = None
    meta: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_by: Optional[int] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)
