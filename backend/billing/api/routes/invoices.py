"""Invoices: list, draft, save, payment received, delete, live feed."""
import asyncio
import contextlib
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, WebSocket, WebSocketDisconnect, status

from billing.api.deps import get_context
from billing.core.audit import AuditLog
from billing.schemas.invoice import Invoice, InvoiceSummary, NextNumberResponse
from billing.services.context import BillingContext
from billing.services.invoice_service import InvoiceDraft, invoice_summary, search_invoices
from billing.services.numbering import next_invoice_number

logger = logging.getLogger(__name__)

router = APIRouter()


def _wire(invoices: List[Invoice]) -> list:
    return [inv.model_dump(by_alias=True, mode="json") for inv in invoices]


def offer_latest(queue: asyncio.Queue, invoices: List[Invoice]):
    """Put a snapshot on a one-slot queue, replacing any snapshot not yet sent."""
    with contextlib.suppress(asyncio.QueueEmpty):
        queue.get_nowait()
    queue.put_nowait(invoices)


@router.get("", response_model=List[Invoice])
async def list_invoices(
    search: Optional[str] = Query(None, description="Customer name fragment or invoice number"),
    ctx: BillingContext = Depends(get_context),
):
    return search_invoices(await ctx.invoice_store.list(), search)


@router.get("/next-number", response_model=NextNumberResponse)
async def get_next_number(ctx: BillingContext = Depends(get_context)):
    return NextNumberResponse(invoice_number=next_invoice_number(await ctx.invoice_store.list()))


@router.get("/draft", response_model=Invoice)
async def new_draft(ctx: BillingContext = Depends(get_context)):
    """Fresh unsaved invoice with the next number and the issuer's details filled in."""
    existing = await ctx.invoice_store.list()
    return InvoiceDraft.new(existing, ctx.company, catalog=ctx.catalog).invoice


@router.websocket("/live")
async def invoices_live(websocket: WebSocket, ctx: BillingContext = Depends(get_context)):
    """Push the full invoice list on connect and after every change."""
    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue(maxsize=1)

    # Store writes may publish from another thread's event loop
    def on_change(invoices: List[Invoice]):
        loop.call_soon_threadsafe(offer_latest, queue, invoices)

    subscription = await ctx.invoice_store.subscribe(on_change)

    async def pump():
        while True:
            invoices = await queue.get()
            await websocket.send_json(_wire(invoices))

    sender = asyncio.create_task(pump())
    try:
        while True:
            await websocket.receive_text()  # client messages are ignored
    except WebSocketDisconnect:
        logger.debug("[Invoices] Live feed client disconnected")
    finally:
        subscription.cancel()
        sender.cancel()
        try:
            await sender
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.debug(f"[Invoices] Live feed sender stopped: {e}")


@router.get("/{invoice_id}", response_model=Invoice)
async def get_invoice(invoice_id: str, ctx: BillingContext = Depends(get_context)):
    return await ctx.invoice_store.get(invoice_id)


@router.get("/{invoice_id}/summary", response_model=InvoiceSummary)
async def get_invoice_summary(invoice_id: str, ctx: BillingContext = Depends(get_context)):
    """Derived figures for printing and previews."""
    return invoice_summary(await ctx.invoice_store.get(invoice_id))


@router.post("", response_model=Invoice, status_code=status.HTTP_201_CREATED)
async def create_invoice(data: Invoice, ctx: BillingContext = Depends(get_context)):
    """Save a new draft. Any id in the body is ignored."""
    draft = InvoiceDraft(data.model_copy(update={"id": None}), catalog=ctx.catalog)
    await draft.save(ctx.invoice_store)
    return draft.invoice


@router.put("/{invoice_id}", response_model=Invoice)
async def save_invoice(invoice_id: str, data: Invoice, ctx: BillingContext = Depends(get_context)):
    """Save an edited invoice. Totals and status are recomputed from the body."""
    draft = InvoiceDraft.from_invoice(data.model_copy(update={"id": invoice_id}), catalog=ctx.catalog)
    await draft.save(ctx.invoice_store)
    return draft.invoice


@router.post("/{invoice_id}/mark-paid", response_model=Invoice)
async def mark_paid(invoice_id: str, ctx: BillingContext = Depends(get_context)):
    """Payment received: amount paid becomes the invoice total."""
    draft = InvoiceDraft.from_invoice(await ctx.invoice_store.get(invoice_id), catalog=ctx.catalog)
    amount = draft.mark_fully_paid()
    await draft.save(ctx.invoice_store)
    AuditLog.log_action("payment_received", "invoice", invoice_id, changes={"amountPaid": amount})
    return draft.invoice


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(invoice_id: str, ctx: BillingContext = Depends(get_context)):
    await ctx.invoice_store.delete(invoice_id)
    AuditLog.log_action("delete", "invoice", invoice_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
