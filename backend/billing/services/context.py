"""Everything a request needs, built once at startup and passed explicitly."""
import logging

from sqlalchemy.orm import sessionmaker

from billing.schemas.settings import CompanySettings
from billing.services.app_state_service import BlobStore
from billing.services.catalog import ProductCatalog
from billing.services.invoice_store import InvoiceStore, SqlInvoiceStore
from billing.services.settings_service import load_company_settings, save_company_settings

logger = logging.getLogger(__name__)


class BillingContext:
    def __init__(
        self,
        invoice_store: InvoiceStore,
        blobs: BlobStore,
        catalog: ProductCatalog,
        company: CompanySettings,
    ):
        self.invoice_store = invoice_store
        self.blobs = blobs
        self.catalog = catalog
        self.company = company

    @classmethod
    def from_session_factory(cls, session_factory: sessionmaker) -> "BillingContext":
        blobs = BlobStore(session_factory)
        return cls(
            invoice_store=SqlInvoiceStore(session_factory),
            blobs=blobs,
            catalog=ProductCatalog.load(blobs),
            company=load_company_settings(blobs),
        )

    def update_company(self, company: CompanySettings) -> CompanySettings:
        """Persist first; the in-memory profile only changes if the write succeeded."""
        save_company_settings(self.blobs, company)
        self.company = company
        logger.info(f"[Settings] Company profile updated: {company.company_name}")
        return company
