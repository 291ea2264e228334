# storefront/services/shipping_service.py
"""
Shipping cost, free-shipping eligibility and delivery estimates.

Everything here is a pure function of (address, subtotal, zone table, now);
no caching and no shared state, so concurrent checkouts need no locking.
"""

import re
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from storefront.config import settings
from storefront.errors import NotServiceableError, ValidationError
from storefront.schemas.address_schemas import ShippingAddress
from storefront.schemas.settings_schemas import SiteConfig
from storefront.schemas.shipping_schemas import (
    DeliveryEstimate,
    ShippingCalculation,
    ShippingInfo,
    ShippingZone,
)
from storefront.services.shipping_zones import (
    HOME_COUNTRY,
    normalize_country,
    resolve_zone,
)
from storefront.utils.money import format_money, to_decimal

PIN_CODE_RE = re.compile(r"^\d{6}$")


def parse_amount(value, field: str = "order_total") -> Decimal:
    try:
        amount = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number", field=field)

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field)
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative", field=field)
    return amount


def _require_destination(address: ShippingAddress):
    if not address.country or not address.country.strip():
        raise ValidationError("Country is required", field="country")
    # domestic zones split by state, so a home-country address needs one
    if normalize_country(address.country) == HOME_COUNTRY and not (
        address.state and address.state.strip()
    ):
        raise ValidationError("State is required", field="state")


def local_today(now: Optional[datetime] = None) -> date:
    """Calendar date in the shipping reference timezone."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(settings.shipping_timezone)).date()


def estimate_delivery(zone: ShippingZone, now: Optional[datetime] = None) -> DeliveryEstimate:
    # plain calendar days; weekends and holidays are not skipped
    today = local_today(now)
    days = zone.estimated_delivery_days
    return DeliveryEstimate(
        min_days=days.min,
        max_days=days.max,
        min_date=today + timedelta(days=days.min),
        max_date=today + timedelta(days=days.max),
    )


def calculate_shipping(
    address: ShippingAddress,
    order_subtotal,
    zones: Optional[Sequence[ShippingZone]] = None,
    now: Optional[datetime] = None,
) -> ShippingCalculation:
    subtotal = parse_amount(order_subtotal)
    _require_destination(address)

    zone = resolve_zone(address, zones)

    threshold = zone.free_shipping_threshold
    is_free = subtotal >= threshold

    return ShippingCalculation(
        zone=zone,
        base_rate=zone.base_rate,
        shipping_cost=Decimal("0") if is_free else zone.base_rate,
        is_free_shipping=is_free,
        free_shipping_threshold=threshold,
        amount_to_free_shipping=max(Decimal("0"), threshold - subtotal),
        estimated_delivery=estimate_delivery(zone, now),
        courier_partner=zone.courier_partner,
    )


def validate_address(address: ShippingAddress) -> List[str]:
    errors = []

    if not address.city or not address.city.strip():
        errors.append("City is required")
    if not address.state or not address.state.strip():
        errors.append("State is required")
    if not address.country or not address.country.strip():
        errors.append("Country is required")
    if not address.postal_code or not address.postal_code.strip():
        errors.append("Postal code is required")

    if (
        normalize_country(address.country) == HOME_COUNTRY
        and address.postal_code
        and not PIN_CODE_RE.match(address.postal_code.strip())
    ):
        errors.append("Invalid Indian PIN code. Must be 6 digits.")

    return errors


def is_serviceable(
    address: ShippingAddress,
    zones: Optional[Sequence[ShippingZone]] = None,
) -> bool:
    try:
        resolve_zone(address, zones)
    except NotServiceableError:
        return False
    return True


def format_display_date(value: date) -> str:
    return f"{value:%b} {value.day}, {value.year}"


def shipping_info(
    address: ShippingAddress,
    order_subtotal,
    site_config: SiteConfig,
    zones: Optional[Sequence[ShippingZone]] = None,
    now: Optional[datetime] = None,
) -> ShippingInfo:
    calc = calculate_shipping(address, order_subtotal, zones, now)
    estimate = calc.estimated_delivery

    prompt = None
    if not calc.is_free_shipping:
        remaining = format_money(calc.amount_to_free_shipping, site_config.currency_symbol)
        prompt = f"Add {remaining} more for free shipping"

    return ShippingInfo(
        zone_id=calc.zone.id,
        zone_name=calc.zone.name,
        shipping_cost=calc.shipping_cost,
        is_free_shipping=calc.is_free_shipping,
        free_shipping_threshold=calc.free_shipping_threshold,
        amount_to_free_shipping=calc.amount_to_free_shipping,
        delivery_estimate=(
            f"{format_display_date(estimate.min_date)} - "
            f"{format_display_date(estimate.max_date)}"
        ),
        courier_partner=calc.courier_partner,
        free_shipping_prompt=prompt,
    )
