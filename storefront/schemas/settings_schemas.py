from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.schemas.common import Money


class SiteConfig(BaseModel):
    """Per-request snapshot of site settings, passed explicitly to services."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    site_name: str = "Kashmir Perfumes"
    currency_code: str = "INR"
    currency_symbol: str = "₹"
    tax_rate: Money = Decimal("0.18")
    cart_button_color: Optional[str] = None
    announcement_text: Optional[str] = None


class SiteSettingsUpdate(BaseModel):
    site_name: Optional[str] = None
    currency_code: Optional[str] = None
    currency_symbol: Optional[str] = None
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=1)
    cart_button_color: Optional[str] = None
    announcement_text: Optional[str] = None
