from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from storefront.utils.clock import utc_now


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: Optional[str] = None
    price: Decimal = Field(max_digits=10, decimal_places=2)
    images: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    sku: Optional[str] = Field(default=None, index=True)
    category_id: Optional[int] = None
    seller_id: Optional[int] = None
    stock: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
