from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.database import get_session
from storefront.dependencies.admin import require_admin
from storefront.dependencies.site import get_site_config
from storefront.schemas.settings_schemas import SiteConfig, SiteSettingsUpdate
from storefront.services.site_settings_service import update_site_settings

public_router = APIRouter()
admin_router = APIRouter()


@public_router.get("", response_model=SiteConfig)
def read_site_settings(site_config: SiteConfig = Depends(get_site_config)):
    return site_config


@admin_router.patch("", response_model=SiteConfig)
def patch_site_settings(
    data: SiteSettingsUpdate,
    session: Session = Depends(get_session),
    admin=Depends(require_admin),
):
    return update_site_settings(session, data)
