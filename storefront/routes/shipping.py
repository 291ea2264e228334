from typing import List

from fastapi import APIRouter, Depends

from storefront.dependencies.site import get_site_config, get_zones
from storefront.schemas.settings_schemas import SiteConfig
from storefront.schemas.shipping_schemas import (
    AddressRequest,
    AddressValidationResult,
    ServiceabilityResult,
    ShippingCalculateRequest,
    ShippingCalculation,
    ShippingConfig,
    ShippingInfo,
    ShippingZone,
)
from storefront.services.shipping_service import (
    calculate_shipping,
    shipping_info,
    validate_address,
)
from storefront.services.shipping_zones import (
    get_zone,
    list_zones,
    resolve_zone,
    shipping_config,
)
from storefront.errors import NotServiceableError

router = APIRouter()


@router.post("/calculate", response_model=ShippingCalculation)
def calculate(data: ShippingCalculateRequest, zones=Depends(get_zones)):
    return calculate_shipping(data.address, data.order_total, zones)


@router.post("/detect-zone", response_model=ShippingZone)
def detect_zone(data: AddressRequest, zones=Depends(get_zones)):
    return resolve_zone(data.address, zones)


@router.post("/info", response_model=ShippingInfo)
def info(
    data: ShippingCalculateRequest,
    zones=Depends(get_zones),
    site_config: SiteConfig = Depends(get_site_config),
):
    return shipping_info(data.address, data.order_total, site_config, zones)


@router.get("/config", response_model=ShippingConfig)
def read_shipping_config(zones=Depends(get_zones)):
    return shipping_config(zones)


@router.get("/zones", response_model=List[ShippingZone])
def zones_list(zones=Depends(get_zones)):
    return list_zones(zones)


@router.get("/zones/{zone_id}", response_model=ShippingZone)
def zone_detail(zone_id: str, zones=Depends(get_zones)):
    return get_zone(zone_id, zones)


@router.post("/validate-address", response_model=AddressValidationResult)
def validate(data: AddressRequest):
    errors = validate_address(data.address)
    return AddressValidationResult(is_valid=not errors, errors=errors)


@router.post("/check-serviceability", response_model=ServiceabilityResult)
def check_serviceability(data: AddressRequest, zones=Depends(get_zones)):
    try:
        zone = resolve_zone(data.address, zones)
    except NotServiceableError as e:
        return ServiceabilityResult(serviceable=False, message=e.message)

    return ServiceabilityResult(
        serviceable=True,
        zone_id=zone.id,
        message="We deliver to this location",
    )
