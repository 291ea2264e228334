from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from storefront.utils.clock import utc_now


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    full_name: str
    role: str = Field(default="customer")
    can_login: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now)
