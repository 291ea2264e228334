# storefront/services/shipping_zones.py
"""
Shipping zone reference data and address -> zone resolution.

Zones are loaded once (built-in table, or the JSON file named by
SHIPPING_ZONES_FILE) and treated as read-only afterwards.
"""

import json
import logging
from decimal import Decimal
from functools import lru_cache
from typing import List, Optional, Sequence

from storefront.config import settings
from storefront.errors import NotServiceableError, ValidationError, ZoneNotFoundError
from storefront.schemas.address_schemas import ShippingAddress
from storefront.schemas.shipping_schemas import (
    CourierPartners,
    DeliveryDays,
    ShippingConfig,
    ShippingZone,
)

logger = logging.getLogger(__name__)

HOME_COUNTRY = "IN"
HOME_REGION_ZONE_ID = "kashmir"
DEFAULT_DOMESTIC_ZONE_ID = "india"
# seller's local-region discount; substring match on the state name
HOME_REGION_KEYWORDS = ("kashmir", "j&k", "ladakh")

DOMESTIC_COURIER = "Blue Dart"
INTERNATIONAL_COURIER = "DHL"

COUNTRY_CODES = {
    "IN": "India",
    "AE": "United Arab Emirates",
    "SA": "Saudi Arabia",
    "QA": "Qatar",
    "KW": "Kuwait",
    "BH": "Bahrain",
    "OM": "Oman",
    "US": "United States",
    "GB": "United Kingdom",
    "CA": "Canada",
    "AU": "Australia",
    "NZ": "New Zealand",
    "SG": "Singapore",
    "MY": "Malaysia",
}

_COUNTRY_NAMES = {name.lower(): code for code, name in COUNTRY_CODES.items()}


DEFAULT_SHIPPING_ZONES = [
    ShippingZone(
        id=HOME_REGION_ZONE_ID,
        name="Kashmir & J&K",
        description="Jammu & Kashmir, Ladakh",
        countries=["IN"],
        states=["Jammu and Kashmir", "Jammu & Kashmir", "J&K", "Kashmir", "Ladakh"],
        base_rate=Decimal("50"),
        free_shipping_threshold=Decimal("2000"),
        estimated_delivery_days=DeliveryDays(min=2, max=3),
        courier_partner=DOMESTIC_COURIER,
    ),
    ShippingZone(
        id="india",
        name="Rest of India",
        description="All other Indian states and territories",
        countries=["IN"],
        base_rate=Decimal("100"),
        free_shipping_threshold=Decimal("2000"),
        estimated_delivery_days=DeliveryDays(min=5, max=7),
        courier_partner=DOMESTIC_COURIER,
    ),
    ShippingZone(
        id="international-gcc",
        name="GCC Countries",
        description="UAE, Saudi Arabia, Qatar, Kuwait, Bahrain, Oman",
        countries=["AE", "SA", "QA", "KW", "BH", "OM"],
        base_rate=Decimal("500"),
        free_shipping_threshold=Decimal("5000"),
        estimated_delivery_days=DeliveryDays(min=7, max=10),
        courier_partner=INTERNATIONAL_COURIER,
    ),
    ShippingZone(
        id="international-us-uk",
        name="USA & UK",
        description="United States and United Kingdom",
        countries=["US", "GB"],
        base_rate=Decimal("800"),
        free_shipping_threshold=Decimal("8000"),
        estimated_delivery_days=DeliveryDays(min=10, max=14),
        courier_partner=INTERNATIONAL_COURIER,
    ),
    ShippingZone(
        id="international-other",
        name="Other International",
        description="Canada, Australia, New Zealand, Singapore, Malaysia",
        countries=["CA", "AU", "NZ", "SG", "MY"],
        base_rate=Decimal("1000"),
        free_shipping_threshold=Decimal("10000"),
        estimated_delivery_days=DeliveryDays(min=10, max=14),
        courier_partner=INTERNATIONAL_COURIER,
    ),
]


def load_zones_file(path: str) -> List[ShippingZone]:
    with open(path, encoding="utf-8") as fh:
        raw = json.load(fh)
    zones = [ShippingZone.model_validate(item) for item in raw]
    logger.info(f"Loaded {len(zones)} shipping zones from {path}")
    return zones


@lru_cache(maxsize=1)
def get_shipping_zones() -> tuple:
    """Configured zone table, read once per process."""
    if settings.shipping_zones_file:
        return tuple(load_zones_file(settings.shipping_zones_file))
    return tuple(DEFAULT_SHIPPING_ZONES)


def normalize_country(country: Optional[str]) -> str:
    value = (country or "").strip()
    if not value:
        return ""
    return _COUNTRY_NAMES.get(value.lower(), value.upper())


def is_home_region(state: Optional[str]) -> bool:
    state_lower = (state or "").lower()
    return any(keyword in state_lower for keyword in HOME_REGION_KEYWORDS)


def _state_matches(zone: ShippingZone, state: str) -> bool:
    if not zone.states:
        return True
    wanted = state.strip().lower()
    return any(s.lower() == wanted for s in zone.states)


def resolve_zone(
    address: ShippingAddress,
    zones: Optional[Sequence[ShippingZone]] = None,
) -> ShippingZone:
    """
    First active zone matching the address.

    The home-region rule runs before the generic country/state scan.
    Raises NotServiceableError when nothing matches.
    """
    if zones is None:
        zones = get_shipping_zones()

    country = normalize_country(address.country)
    if not country:
        raise ValidationError("Country is required", field="country")

    active = [z for z in zones if z.is_active]

    if country == HOME_COUNTRY and is_home_region(address.state):
        for zone in active:
            if zone.id == HOME_REGION_ZONE_ID:
                return zone

    state = address.state or ""
    for zone in active:
        if country in zone.countries and _state_matches(zone, state):
            return zone

    raise NotServiceableError(country, address.state)


def list_zones(zones: Optional[Sequence[ShippingZone]] = None) -> List[ShippingZone]:
    if zones is None:
        zones = get_shipping_zones()
    return [z for z in zones if z.is_active]


def get_zone(zone_id: str, zones: Optional[Sequence[ShippingZone]] = None) -> ShippingZone:
    for zone in list_zones(zones):
        if zone.id == zone_id:
            return zone
    raise ZoneNotFoundError(zone_id)


def _couriers(zones: Sequence[ShippingZone]) -> List[str]:
    return sorted({z.courier_partner for z in zones})


def shipping_config(zones: Optional[Sequence[ShippingZone]] = None) -> ShippingConfig:
    active = list_zones(zones)
    by_id = {z.id: z for z in active}
    domestic = [z for z in active if HOME_COUNTRY in z.countries]
    international = [z for z in active if HOME_COUNTRY not in z.countries]

    default = by_id.get(DEFAULT_DOMESTIC_ZONE_ID)
    home = by_id.get(HOME_REGION_ZONE_ID)

    return ShippingConfig(
        default_free_shipping_threshold=default.free_shipping_threshold if default else None,
        default_shipping_rate=default.base_rate if default else None,
        kashmir_shipping_rate=home.base_rate if home else None,
        international_base_rate=min((z.base_rate for z in international), default=None),
        courier_partners=CourierPartners(
            domestic=_couriers(domestic),
            international=_couriers(international),
        ),
        timezone=settings.shipping_timezone,
    )
