"""
Invoice Store: persistence and live-update boundary for invoices.

Readers (dashboard, invoice list, editor) subscribe once and receive the
full, ordered invoice list whenever anything changes. There is no delta
feed: every notification is the complete current list.

Two backends share the same contract:
- SqlInvoiceStore: SQLAlchemy tables, blocking work pushed to the executor
- MemoryInvoiceStore: process-local dict, for tests and offline use

Each mutation is a single independent write. Nothing is wrapped in a larger
transaction, and ordering between writers in different sessions is not
guaranteed.
"""
import asyncio
import functools
import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from billing.core.exceptions import NotFoundError, SyncError, ValidationError
from billing.core.tokens import new_record_id
from billing.models.invoice import InvoiceRow
from billing.schemas.invoice import Invoice

logger = logging.getLogger(__name__)

InvoiceListCallback = Callable[[List[Invoice]], None]

# Wire name / attribute name -> attribute name, for partial updates
_FIELD_NAMES: Dict[str, str] = {}
for _name, _field in Invoice.model_fields.items():
    _FIELD_NAMES[_name] = _name
    if _field.alias:
        _FIELD_NAMES[_field.alias] = _name


def normalize_patch(fields: dict) -> dict:
    """Map camelCase or snake_case keys onto Invoice attributes. The id is never patchable."""
    patch = {}
    for key, value in fields.items():
        attr = _FIELD_NAMES.get(key)
        if attr is None:
            raise ValidationError(f"Unknown invoice field '{key}'")
        if attr == "id":
            continue
        patch[attr] = value
    return patch


def merge_invoice(current: Invoice, fields: dict) -> Invoice:
    """Field-by-field merge of a patch into a stored invoice, revalidated."""
    patch = normalize_patch(fields)
    merged = {**current.model_dump(), **patch}
    try:
        return Invoice.model_validate(merged)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid invoice update: {e.errors()[0]['msg']}") from e


class Subscription:
    """Handle returned by subscribe(). cancel() is idempotent."""

    def __init__(self, store: "InvoiceStore", callback: InvoiceListCallback):
        self._store = store
        self.callback = callback
        self.active = True

    def cancel(self):
        if self.active:
            self.active = False
            self._store._unsubscribe(self)


class InvoiceStore(ABC):
    """Backend-agnostic store contract plus the subscriber registry."""

    def __init__(self):
        self._subscribers: List[Subscription] = []

    @abstractmethod
    async def list(self) -> List[Invoice]:
        """All invoices, newest first."""

    @abstractmethod
    async def get(self, invoice_id: str) -> Invoice:
        """Raises NotFoundError."""

    @abstractmethod
    async def _insert(self, invoice: Invoice) -> str:
        ...

    @abstractmethod
    async def _merge(self, invoice_id: str, fields: dict) -> Invoice:
        ...

    @abstractmethod
    async def _remove(self, invoice_id: str) -> bool:
        """True if something was deleted."""

    async def create(self, invoice: Invoice) -> str:
        """Store a new invoice under a fresh id. Any id on the input is ignored."""
        invoice_id = await self._insert(invoice)
        logger.info(f"[InvoiceStore] Created invoice {invoice_id} (#{invoice.invoice_number})")
        await self._publish()
        return invoice_id

    async def update(self, invoice_id: str, fields: dict) -> Invoice:
        """Merge the given fields into the stored invoice. Raises NotFoundError."""
        updated = await self._merge(invoice_id, fields)
        logger.info(f"[InvoiceStore] Updated invoice {invoice_id}: {sorted(fields)}")
        await self._publish()
        return updated

    async def delete(self, invoice_id: str) -> None:
        """Idempotent: deleting an unknown id is not an error."""
        removed = await self._remove(invoice_id)
        if removed:
            logger.info(f"[InvoiceStore] Deleted invoice {invoice_id}")
            await self._publish()
        else:
            logger.debug(f"[InvoiceStore] Delete of unknown invoice {invoice_id} ignored")

    # ------------------------------------------------------------------
    # Live updates
    # ------------------------------------------------------------------

    async def subscribe(self, callback: InvoiceListCallback) -> Subscription:
        """
        Register for full-list notifications.

        The callback is invoked right away with the current list, then
        again after every successful create/update/delete.
        """
        subscription = Subscription(self, callback)
        self._subscribers.append(subscription)
        logger.debug(f"[InvoiceStore] Subscriber added ({len(self._subscribers)} active)")
        self._deliver(subscription, await self.list())
        return subscription

    def _unsubscribe(self, subscription: Subscription):
        if subscription in self._subscribers:
            self._subscribers.remove(subscription)
        logger.debug(f"[InvoiceStore] Subscriber removed ({len(self._subscribers)} active)")

    async def _publish(self):
        if not self._subscribers:
            return
        try:
            snapshot = await self.list()
        except SyncError as e:
            # The write itself succeeded; readers catch up on the next change.
            logger.warning(f"[InvoiceStore] Could not load list for subscribers: {e.message}")
            return
        for subscription in list(self._subscribers):
            self._deliver(subscription, snapshot)

    def _deliver(self, subscription: Subscription, snapshot: List[Invoice]):
        if not subscription.active:
            return
        try:
            subscription.callback([inv.model_copy(deep=True) for inv in snapshot])
        except Exception:
            logger.exception("[InvoiceStore] Subscriber callback failed")


class MemoryInvoiceStore(InvoiceStore):
    """Process-local store. Newest first by insertion."""

    def __init__(self):
        super().__init__()
        self._rows: Dict[str, Tuple[int, datetime, Invoice]] = {}
        self._seq = 0

    async def list(self) -> List[Invoice]:
        rows = sorted(self._rows.values(), key=lambda r: (r[1], r[0]), reverse=True)
        return [inv.model_copy(deep=True) for _, _, inv in rows]

    async def get(self, invoice_id: str) -> Invoice:
        row = self._rows.get(invoice_id)
        if row is None:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        return row[2].model_copy(deep=True)

    async def _insert(self, invoice: Invoice) -> str:
        invoice_id = new_record_id()
        self._seq += 1
        stored = invoice.model_copy(deep=True, update={"id": invoice_id})
        self._rows[invoice_id] = (self._seq, datetime.now(timezone.utc), stored)
        return invoice_id

    async def _merge(self, invoice_id: str, fields: dict) -> Invoice:
        row = self._rows.get(invoice_id)
        if row is None:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        seq, created_at, current = row
        merged = merge_invoice(current, fields)
        self._rows[invoice_id] = (seq, created_at, merged)
        return merged.model_copy(deep=True)

    async def _remove(self, invoice_id: str) -> bool:
        return self._rows.pop(invoice_id, None) is not None


def row_to_invoice(row: InvoiceRow) -> Invoice:
    return Invoice(
        id=row.id,
        invoice_number=row.invoice_number or "",
        date=row.date or "",
        customer_name=row.customer_name or "",
        customer_phone=row.customer_phone or "",
        address=row.address or "",
        email=row.email or "",
        office_no=row.office_no or "",
        msme_no=row.msme_no or "",
        items=row.items or [],
        extra_charges=row.extra_charges or 0,
        extra_charges_label=row.extra_charges_label or "",
        amount_paid=row.amount_paid or 0,
        total_amount=row.total_amount or 0,
        status=row.status or "UNPAID",
    )


def apply_to_row(row: InvoiceRow, invoice: Invoice):
    row.invoice_number = invoice.invoice_number
    row.date = invoice.date
    row.customer_name = invoice.customer_name
    row.customer_phone = invoice.customer_phone
    row.address = invoice.address
    row.email = invoice.email
    row.office_no = invoice.office_no
    row.msme_no = invoice.msme_no
    row.items = [item.model_dump(by_alias=True, mode="json") for item in invoice.items]
    row.extra_charges = invoice.extra_charges
    row.extra_charges_label = invoice.extra_charges_label
    row.amount_paid = invoice.amount_paid
    row.total_amount = invoice.total_amount
    row.status = invoice.status.value


class SqlInvoiceStore(InvoiceStore):
    """
    SQLAlchemy-backed store.

    Sessions are short-lived, one per operation. Blocking DB calls run in
    the default executor so the event loop stays responsive.
    SQLAlchemy failures are rolled back and surfaced as SyncError.
    """

    def __init__(self, session_factory: sessionmaker):
        super().__init__()
        self._session_factory = session_factory

    async def _run(self, fn, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(self._in_session, fn, *args))

    def _in_session(self, fn, *args):
        db: Session = self._session_factory()
        try:
            return fn(db, *args)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[InvoiceStore] Database error in {fn.__name__}: {e}")
            raise SyncError("Invoice store unavailable, please retry") from e
        finally:
            db.close()

    async def list(self) -> List[Invoice]:
        return await self._run(self._list_sync)

    async def get(self, invoice_id: str) -> Invoice:
        return await self._run(self._get_sync, invoice_id)

    async def _insert(self, invoice: Invoice) -> str:
        return await self._run(self._insert_sync, invoice)

    async def _merge(self, invoice_id: str, fields: dict) -> Invoice:
        return await self._run(self._merge_sync, invoice_id, fields)

    async def _remove(self, invoice_id: str) -> bool:
        return await self._run(self._remove_sync, invoice_id)

    @staticmethod
    def _find(db: Session, invoice_id: str) -> Optional[InvoiceRow]:
        return db.query(InvoiceRow).filter(InvoiceRow.id == invoice_id).first()

    @staticmethod
    def _list_sync(db: Session) -> List[Invoice]:
        rows = db.query(InvoiceRow).order_by(InvoiceRow.created_at.desc(), InvoiceRow.seq.desc()).all()
        return [row_to_invoice(r) for r in rows]

    def _get_sync(self, db: Session, invoice_id: str) -> Invoice:
        row = self._find(db, invoice_id)
        if not row:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        return row_to_invoice(row)

    @staticmethod
    def _insert_sync(db: Session, invoice: Invoice) -> str:
        invoice_id = new_record_id()
        row = InvoiceRow(id=invoice_id, seq=time.time_ns())
        apply_to_row(row, invoice)
        db.add(row)
        db.commit()
        return invoice_id

    def _merge_sync(self, db: Session, invoice_id: str, fields: dict) -> Invoice:
        row = self._find(db, invoice_id)
        if not row:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        merged = merge_invoice(row_to_invoice(row), fields)
        apply_to_row(row, merged)
        db.commit()
        return merged

    def _remove_sync(self, db: Session, invoice_id: str) -> bool:
        row = self._find(db, invoice_id)
        if not row:
            return False
        db.delete(row)
        db.commit()
        return True
