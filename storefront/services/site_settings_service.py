# storefront/services/site_settings_service.py

import logging

from sqlmodel import Session

from storefront.models.site_settings import SiteSettings
from storefront.schemas.settings_schemas import SiteConfig, SiteSettingsUpdate
from storefront.utils.clock import utc_now

logger = logging.getLogger(__name__)

SETTINGS_ROW_ID = 1


def load_site_config(session: Session) -> SiteConfig:
    """Immutable snapshot of the settings row, defaults when it was never saved."""
    row = session.get(SiteSettings, SETTINGS_ROW_ID)
    if row is None:
        return SiteConfig()
    return SiteConfig.model_validate(row)


def update_site_settings(session: Session, data: SiteSettingsUpdate) -> SiteConfig:
    row = session.get(SiteSettings, SETTINGS_ROW_ID)
    if row is None:
        row = SiteSettings(id=SETTINGS_ROW_ID)

    for key, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(row, key, value)
    row.updated_at = utc_now()

    session.add(row)
    session.commit()
    session.refresh(row)
    logger.info("Site settings updated")
    return SiteConfig.model_validate(row)
