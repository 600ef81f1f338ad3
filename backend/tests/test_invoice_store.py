"""Invoice store contract, run against both backends."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from billing.core.exceptions import NotFoundError, SyncError, ValidationError
from billing.schemas.invoice import InvoiceStatus
from billing.services.invoice_store import MemoryInvoiceStore, SqlInvoiceStore, normalize_patch


@pytest.fixture(params=["memory", "sql"])
def store(request, session_factory):
    if request.param == "memory":
        return MemoryInvoiceStore()
    return SqlInvoiceStore(session_factory)


class TestCrud:

    def test_create_assigns_id_and_ignores_input_id(self, store, run, make_invoice):
        invoice_id = run(store.create(make_invoice(id="client-side")))
        assert invoice_id and invoice_id != "client-side"
        stored = run(store.get(invoice_id))
        assert stored.id == invoice_id
        assert stored.customer_name == "Priya Raman"
        assert [(i.quantity, i.rate) for i in stored.items] == [(2, 250), (1, 50)]

    def test_list_is_newest_first(self, store, run, make_invoice):
        first = run(store.create(make_invoice(number="1405")))
        second = run(store.create(make_invoice(number="1406")))
        third = run(store.create(make_invoice(number="1407")))
        assert [inv.id for inv in run(store.list())] == [third, second, first]

    def test_update_merges_fields(self, store, run, make_invoice):
        invoice_id = run(store.create(make_invoice(customer_phone="98400 00000")))
        run(store.update(invoice_id, {"amountPaid": 200, "status": "PARTIAL"}))
        stored = run(store.get(invoice_id))
        assert stored.amount_paid == 200
        assert stored.status == InvoiceStatus.PARTIAL
        assert stored.customer_phone == "98400 00000"
        assert len(stored.items) == 2

    def test_update_accepts_items_in_wire_format(self, store, run, make_invoice):
        invoice_id = run(store.create(make_invoice()))
        run(store.update(invoice_id, {"items": [{"id": "x", "description": "Eid Card", "quantity": 3, "rate": 250, "productId": "12"}]}))
        item = run(store.get(invoice_id)).items[0]
        assert (item.description, item.quantity, item.product_id) == ("Eid Card", 3, "12")

    def test_update_missing_raises_not_found(self, store, run):
        with pytest.raises(NotFoundError):
            run(store.update("nope", {"amountPaid": 1}))

    def test_update_rejects_unknown_field(self, store, run, make_invoice):
        invoice_id = run(store.create(make_invoice()))
        with pytest.raises(ValidationError):
            run(store.update(invoice_id, {"discount": 10}))

    def test_update_rejects_negative_payment(self, store, run, make_invoice):
        invoice_id = run(store.create(make_invoice()))
        with pytest.raises(ValidationError):
            run(store.update(invoice_id, {"amountPaid": -5}))
        assert run(store.get(invoice_id)).amount_paid == 0

    def test_get_missing_raises_not_found(self, store, run):
        with pytest.raises(NotFoundError):
            run(store.get("nope"))

    def test_delete_is_idempotent(self, store, run, make_invoice):
        keep = run(store.create(make_invoice(number="1405")))
        gone = run(store.create(make_invoice(number="1406")))
        run(store.delete(gone))
        assert [inv.id for inv in run(store.list())] == [keep]
        run(store.delete(gone))
        assert [inv.id for inv in run(store.list())] == [keep]


class TestSubscriptions:

    def test_initial_snapshot_then_full_list_on_change(self, store, run, make_invoice):
        received = []
        run(store.subscribe(received.append))
        assert received == [[]]

        invoice_id = run(store.create(make_invoice()))
        assert [inv.id for inv in received[-1]] == [invoice_id]

        run(store.update(invoice_id, {"amountPaid": 550}))
        assert received[-1][0].amount_paid == 550

        run(store.delete(invoice_id))
        assert received[-1] == []
        assert len(received) == 4

    def test_every_subscriber_is_notified(self, store, run, make_invoice):
        dashboard, invoice_list = [], []
        run(store.subscribe(dashboard.append))
        run(store.subscribe(invoice_list.append))
        run(store.create(make_invoice()))
        assert len(dashboard[-1]) == len(invoice_list[-1]) == 1

    def test_cancel_stops_notifications(self, store, run, make_invoice):
        received = []
        subscription = run(store.subscribe(received.append))
        subscription.cancel()
        subscription.cancel()
        run(store.create(make_invoice()))
        assert received == [[]]

    def test_failing_callback_does_not_break_writes(self, store, run, make_invoice):
        def broken(invoices):
            raise RuntimeError("render failed")

        received = []
        run(store.subscribe(broken))
        run(store.subscribe(received.append))
        invoice_id = run(store.create(make_invoice()))
        assert run(store.get(invoice_id)).id == invoice_id
        assert len(received[-1]) == 1

    def test_noop_delete_does_not_notify(self, store, run):
        received = []
        run(store.subscribe(received.append))
        run(store.delete("never-existed"))
        assert received == [[]]

    def test_subscribers_cannot_mutate_store(self, store, run, make_invoice):
        received = []
        run(store.subscribe(received.append))
        invoice_id = run(store.create(make_invoice()))
        received[-1][0].customer_name = "Tampered"
        assert run(store.get(invoice_id)).customer_name == "Priya Raman"


def test_sql_errors_surface_as_sync_error(run, make_invoice):
    # No tables created: every query fails at the database
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    store = SqlInvoiceStore(sessionmaker(bind=engine))
    with pytest.raises(SyncError):
        run(store.list())
    with pytest.raises(SyncError):
        run(store.create(make_invoice()))


def test_normalize_patch_drops_id_and_maps_aliases():
    assert normalize_patch({"id": "x", "extraChargesLabel": "Design Fee", "amount_paid": 5}) == {
        "extra_charges_label": "Design Fee",
        "amount_paid": 5,
    }
