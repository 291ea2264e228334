from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from storefront.utils.clock import utc_now


class SiteSettings(SQLModel, table=True):
    __tablename__ = "site_settings"

    id: Optional[int] = Field(default=1, primary_key=True)
    site_name: str = Field(default="Kashmir Perfumes")
    currency_code: str = Field(default="INR")
    currency_symbol: str = Field(default="₹")
    tax_rate: Decimal = Field(default=Decimal("0.18"), max_digits=5, decimal_places=4)
    cart_button_color: Optional[str] = None
    announcement_text: Optional[str] = None

    updated_at: datetime = Field(default_factory=utc_now)
