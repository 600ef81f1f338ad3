from billing.models.invoice import InvoiceRow
from billing.models.app_state import AppState

__all__ = ["InvoiceRow", "AppState"]
