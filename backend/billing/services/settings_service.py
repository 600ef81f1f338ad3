"""Company profile: loaded at startup, rewritten wholesale on change."""
import logging

from billing.core.audit import AuditLog
from billing.schemas.settings import CompanySettings
from billing.services.app_state_service import BlobStore, COMPANY_SETTINGS_KEY

logger = logging.getLogger(__name__)


def load_company_settings(blobs: BlobStore) -> CompanySettings:
    stored = blobs.load(COMPANY_SETTINGS_KEY)
    if stored is None:
        logger.info("[Settings] No saved company profile, using defaults")
        return CompanySettings()
    return CompanySettings.model_validate(stored)


def save_company_settings(blobs: BlobStore, company: CompanySettings) -> CompanySettings:
    blobs.save(COMPANY_SETTINGS_KEY, company.model_dump(mode="json", by_alias=True))
    AuditLog.log_action("update", "settings", None, changes={"companyName": company.company_name})
    return company
