"""Invoice aggregate: the line-item cart, its derived totals and payment status.

Totals and status are never stored as independent state on a draft. They are
recomputed from items, extra charges and amount paid on every read, and only
copied onto the invoice (total_amount, status) as a snapshot when it is saved.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from billing.core.audit import AuditLog
from billing.core.config import settings
from billing.core.exceptions import ValidationError
from billing.core.tokens import new_token
from billing.schemas.invoice import Invoice, InvoiceStatus, InvoiceSummary, LineItem
from billing.schemas.settings import CompanySettings
from billing.services.numbering import next_invoice_number

logger = logging.getLogger(__name__)

# Line item fields a user may edit, keyed by both wire and attribute name
EDITABLE_ITEM_FIELDS = {
    "description": "description",
    "quantity": "quantity",
    "rate": "rate",
    "productId": "product_id",
    "product_id": "product_id",
}


@dataclass(frozen=True)
class InvoiceTotals:
    sub_total: float
    total: float
    balance_due: float


def compute_totals(items: Iterable[LineItem], extra_charges: float = 0, amount_paid: float = 0) -> InvoiceTotals:
    """Pure derivation. An empty cart yields zeros plus any extra charges.

    balance_due is not clamped: an overpaid invoice has a negative balance.
    """
    sub_total = sum((item.quantity * item.rate for item in items), 0.0)
    total = sub_total + (extra_charges or 0)
    return InvoiceTotals(sub_total=sub_total, total=total, balance_due=total - (amount_paid or 0))


def derive_status(total: float, amount_paid: float) -> InvoiceStatus:
    """PAID when paid >= total (so 0/0 is PAID), PARTIAL when some is paid, else UNPAID."""
    paid = amount_paid or 0
    if paid >= total:
        return InvoiceStatus.PAID
    if paid > 0:
        return InvoiceStatus.PARTIAL
    return InvoiceStatus.UNPAID


def invoice_totals(invoice: Invoice) -> InvoiceTotals:
    return compute_totals(invoice.items, invoice.extra_charges, invoice.amount_paid)


def invoice_status(invoice: Invoice) -> InvoiceStatus:
    """Status from the invoice's contents, ignoring whatever was stored."""
    return derive_status(invoice_totals(invoice).total, invoice.amount_paid)


def invoice_summary(invoice: Invoice) -> InvoiceSummary:
    """Everything a printed or on-screen invoice shows, derived in one place."""
    totals = invoice_totals(invoice)
    return InvoiceSummary(
        sub_total=totals.sub_total,
        extra_charges=invoice.extra_charges,
        extra_charges_label=invoice.extra_charges_label,
        amount_paid=invoice.amount_paid,
        balance_due=totals.balance_due,
        total=totals.total,
        status=derive_status(totals.total, invoice.amount_paid),
        items=[item.model_copy() for item in invoice.items],
    )


def search_invoices(invoices: Iterable[Invoice], search: Optional[str]) -> List[Invoice]:
    """Case-insensitive customer name match, or exact invoice number."""
    invoices = list(invoices)
    if not search or not search.strip():
        return invoices
    needle = search.strip().lower()
    return [
        inv for inv in invoices
        if needle in inv.customer_name.lower() or inv.invoice_number == search.strip()
    ]


def blank_item(taken: Iterable[str] = ()) -> LineItem:
    return LineItem(id=new_token(set(taken)), description="", quantity=1, rate=0)


class InvoiceDraft:
    """
    One invoice's editable state, owned by a single editing session.

    A draft without an id has never been saved; save() creates it in the
    store. Once it has an id, save() updates the stored record in place.
    """

    def __init__(self, invoice: Invoice, catalog=None):
        self.invoice = invoice.model_copy(deep=True)
        self._catalog = catalog

    @classmethod
    def new(
        cls,
        existing: Iterable[Invoice],
        company: CompanySettings,
        catalog=None,
        today: Optional[date] = None,
    ) -> "InvoiceDraft":
        """Start a fresh draft: next number, today's date, issuer details, one blank line."""
        today = today or date.today()
        invoice = Invoice(
            id=None,
            invoice_number=next_invoice_number(existing),
            date=today.isoformat(),
            office_no=company.office_phone,
            msme_no=company.msme_no,
            email=company.email,
            items=[blank_item()],
            extra_charges=0,
            extra_charges_label=settings.DEFAULT_EXTRA_CHARGES_LABEL,
            amount_paid=0,
        )
        return cls(invoice, catalog=catalog)

    @classmethod
    def from_invoice(cls, invoice: Invoice, catalog=None) -> "InvoiceDraft":
        """Open a stored invoice for editing."""
        return cls(invoice, catalog=catalog)

    @property
    def is_draft(self) -> bool:
        return self.invoice.id is None

    @property
    def items(self) -> List[LineItem]:
        return self.invoice.items

    def _check_index(self, index: int):
        if not 0 <= index < len(self.invoice.items):
            raise IndexError(f"Line item {index} out of range (invoice has {len(self.invoice.items)})")

    # ------------------------------------------------------------------
    # Line items
    # ------------------------------------------------------------------

    def add_item(self) -> LineItem:
        item = blank_item(item.id for item in self.invoice.items)
        self.invoice.items.append(item)
        return item

    def update_item(self, index: int, field: str, value: Any) -> LineItem:
        self._check_index(index)
        attr = EDITABLE_ITEM_FIELDS.get(field)
        if attr is None:
            raise ValidationError(f"Line item field '{field}' cannot be edited")
        current = self.invoice.items[index]
        try:
            updated = LineItem.model_validate({**current.model_dump(), attr: value})
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {field}: {e.errors()[0]['msg']}") from e
        self.invoice.items[index] = updated
        return updated

    def remove_item(self, index: int) -> LineItem:
        """Removing the last line is allowed; totals of an empty cart are zero."""
        self._check_index(index)
        return self.invoice.items.pop(index)

    def select_product(self, index: int, product_id: str) -> Optional[LineItem]:
        """Fill a line from a catalog product. Unknown products leave the line untouched."""
        self._check_index(index)
        product = self._catalog.get(product_id) if self._catalog is not None else None
        if product is None:
            logger.debug(f"[InvoiceDraft] Product {product_id} not in catalog, line {index} unchanged")
            return None
        current = self.invoice.items[index]
        updated = current.model_copy(update={
            "description": product.name,
            "rate": product.price,
            "product_id": product.id,
        })
        self.invoice.items[index] = updated
        return updated

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def compute_totals(self) -> InvoiceTotals:
        return invoice_totals(self.invoice)

    @property
    def status(self) -> InvoiceStatus:
        return invoice_status(self.invoice)

    def summary(self) -> InvoiceSummary:
        return invoice_summary(self.invoice)

    # ------------------------------------------------------------------
    # Whole-invoice actions
    # ------------------------------------------------------------------

    def clear(self, confirmed: bool = False) -> bool:
        """Reset the cart to one blank line and zero charges/payment.

        Destructive, so callers must pass confirmed=True once the user agreed.
        """
        if not confirmed:
            logger.debug("[InvoiceDraft] Clear requested without confirmation, ignored")
            return False
        self.invoice.items = [blank_item()]
        self.invoice.amount_paid = 0
        self.invoice.extra_charges = 0
        self.invoice.extra_charges_label = settings.DEFAULT_EXTRA_CHARGES_LABEL
        return True

    def mark_fully_paid(self) -> float:
        """Payment received: amount paid becomes the current total."""
        total = self.compute_totals().total
        self.invoice.amount_paid = total
        return total

    def validate(self):
        if not (self.invoice.customer_name or "").strip():
            raise ValidationError("Customer name required")

    def snapshot(self) -> Invoice:
        """Copy of the invoice with total_amount and status set from the current contents."""
        totals = self.compute_totals()
        return self.invoice.model_copy(
            deep=True,
            update={
                "total_amount": totals.total,
                "status": derive_status(totals.total, self.invoice.amount_paid),
            },
        )

    async def save(self, store) -> str:
        """
        Validate and persist. Returns the store id.

        Raises ValidationError before touching the store. If the store
        raises, the draft is left exactly as it was so the user can retry.
        """
        self.validate()
        record = self.snapshot()

        if self.is_draft:
            invoice_id = await store.create(record)
            action = "create"
        else:
            invoice_id = record.id
            await store.update(invoice_id, record.to_record())
            action = "update"

        self.invoice = record.model_copy(update={"id": invoice_id})
        logger.info(
            f"[InvoiceDraft] Saved invoice #{record.invoice_number} ({invoice_id}): "
            f"total={record.total_amount} status={record.status.value}"
        )
        AuditLog.log_action(action, "invoice", invoice_id, changes={
            "invoiceNumber": record.invoice_number,
            "totalAmount": record.total_amount,
            "status": record.status.value,
        })
        return invoice_id
