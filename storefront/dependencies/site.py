from fastapi import Depends
from sqlmodel import Session

from storefront.database import get_session
from storefront.schemas.settings_schemas import SiteConfig
from storefront.services.shipping_zones import get_shipping_zones
from storefront.services.site_settings_service import load_site_config


def get_site_config(session: Session = Depends(get_session)) -> SiteConfig:
    """Resolved once per request and handed to whatever needs it."""
    return load_site_config(session)


def get_zones():
    return get_shipping_zones()
