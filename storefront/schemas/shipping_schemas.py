from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from storefront.schemas.address_schemas import ShippingAddress
from storefront.schemas.common import Money


class DeliveryDays(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: int = Field(ge=0)
    max: int = Field(ge=0)


class ShippingZone(BaseModel):
    """Static reference data; loaded once, never mutated."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    countries: List[str]
    # empty means "any state of the listed countries"
    states: List[str] = []
    base_rate: Money = Field(ge=0)
    free_shipping_threshold: Money = Field(ge=0)
    estimated_delivery_days: DeliveryDays
    courier_partner: str
    is_active: bool = True


class DeliveryEstimate(BaseModel):
    min_days: int
    max_days: int
    min_date: date
    max_date: date


class ShippingCalculation(BaseModel):
    zone: ShippingZone
    base_rate: Money
    shipping_cost: Money
    is_free_shipping: bool
    free_shipping_threshold: Money
    amount_to_free_shipping: Money
    estimated_delivery: DeliveryEstimate
    courier_partner: str


class ShippingCalculateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    address: ShippingAddress
    order_total: Decimal = Field(
        validation_alias=AliasChoices("order_total", "orderTotal")
    )


class AddressRequest(BaseModel):
    address: ShippingAddress


class AddressValidationResult(BaseModel):
    is_valid: bool
    errors: List[str]


class ServiceabilityResult(BaseModel):
    serviceable: bool
    zone_id: Optional[str] = None
    message: str


class ShippingInfo(BaseModel):
    zone_id: str
    zone_name: str
    shipping_cost: Money
    is_free_shipping: bool
    free_shipping_threshold: Money
    amount_to_free_shipping: Money
    delivery_estimate: str
    courier_partner: str
    free_shipping_prompt: Optional[str] = None


class CourierPartners(BaseModel):
    domestic: List[str]
    international: List[str]


class ShippingConfig(BaseModel):
    """Storefront-facing summary of the zone table."""

    default_free_shipping_threshold: Optional[Money] = None
    default_shipping_rate: Optional[Money] = None
    kashmir_shipping_rate: Optional[Money] = None
    international_base_rate: Optional[Money] = None
    courier_partners: CourierPartners
    timezone: str
