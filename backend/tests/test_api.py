"""HTTP and WebSocket endpoints over the billing core."""
import asyncio

import pytest

from billing.api.routes.invoices import offer_latest


def _payload(**overrides):
    body = {
        "invoiceNumber": "1405",
        "date": "2026-03-14",
        "customerName": "Priya Raman",
        "customerPhone": "98400 12345",
        "items": [
            {"id": "a", "description": "Birthday Card", "quantity": 2, "rate": 250, "productId": "4"},
            {"id": "b", "description": "Design Revision Fee", "quantity": 1, "rate": 50},
        ],
        "extraCharges": 0,
        "extraChargesLabel": "Extra Charges",
        "amountPaid": 300,
    }
    body.update(overrides)
    return body


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestInvoices:

    def test_create_computes_snapshot(self, client):
        resp = client.post("/invoices", json=_payload(totalAmount=1, status="PAID"))
        assert resp.status_code == 201
        data = resp.json()
        assert data["id"]
        assert data["totalAmount"] == 550
        assert data["status"] == "PARTIAL"
        assert data["items"][0]["productId"] == "4"

    def test_create_without_customer_is_rejected(self, client):
        resp = client.post("/invoices", json=_payload(customerName=""))
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Customer name required"
        assert client.get("/invoices").json() == []

    def test_negative_quantity_is_rejected(self, client):
        body = _payload(items=[{"id": "a", "description": "Card", "quantity": -1, "rate": 10}])
        assert client.post("/invoices", json=body).status_code == 422

    def test_summary_and_mark_paid(self, client):
        invoice_id = client.post("/invoices", json=_payload()).json()["id"]

        summary = client.get(f"/invoices/{invoice_id}/summary").json()
        assert summary["subTotal"] == 550
        assert summary["total"] == 550
        assert summary["balanceDue"] == 250
        assert summary["status"] == "PARTIAL"
        assert summary["extraChargesLabel"] == "Extra Charges"

        paid = client.post(f"/invoices/{invoice_id}/mark-paid").json()
        assert paid["amountPaid"] == 550
        assert paid["status"] == "PAID"
        assert client.get(f"/invoices/{invoice_id}/summary").json()["balanceDue"] == 0

    def test_edit_and_save(self, client):
        invoice_id = client.post("/invoices", json=_payload()).json()["id"]
        body = _payload(extraCharges=50, extraChargesLabel="Design Fee", amountPaid=600)
        resp = client.put(f"/invoices/{invoice_id}", json=body)
        assert resp.status_code == 200
        stored = client.get(f"/invoices/{invoice_id}").json()
        assert stored["totalAmount"] == 600
        assert stored["status"] == "PAID"
        assert stored["extraChargesLabel"] == "Design Fee"
        assert len(client.get("/invoices").json()) == 1

    def test_save_unknown_invoice_is_404(self, client):
        assert client.put("/invoices/missing", json=_payload()).status_code == 404
        assert client.get("/invoices/missing").status_code == 404
        assert client.post("/invoices/missing/mark-paid").status_code == 404

    def test_delete_twice(self, client):
        invoice_id = client.post("/invoices", json=_payload()).json()["id"]
        assert client.delete(f"/invoices/{invoice_id}").status_code == 204
        assert client.delete(f"/invoices/{invoice_id}").status_code == 204
        assert client.get("/invoices").json() == []

    def test_list_search_and_next_number(self, client):
        client.post("/invoices", json=_payload(invoiceNumber="1500", customerName="Arjun Mehta"))
        client.post("/invoices", json=_payload(invoiceNumber="abc", customerName="Priya Raman"))

        assert client.get("/invoices/next-number").json() == {"invoiceNumber": "1501"}
        found = client.get("/invoices", params={"search": "arjun"}).json()
        assert [inv["invoiceNumber"] for inv in found] == ["1500"]
        assert [inv["invoiceNumber"] for inv in client.get("/invoices").json()] == ["abc", "1500"]

    def test_draft_uses_company_profile(self, client):
        client.put("/settings", json={"companyName": "HG", "officePhone": "044 1234", "email": "hello@happygreeting.in", "msmeNo": "UDYAM-1"})
        draft = client.get("/invoices/draft").json()
        assert draft["id"] is None
        assert draft["invoiceNumber"] == "1405"
        assert draft["officeNo"] == "044 1234"
        assert draft["msmeNo"] == "UDYAM-1"
        assert len(draft["items"]) == 1
        assert client.get("/invoices").json() == []


class TestLiveFeed:

    def test_pushes_full_list_on_change(self, client):
        with client.websocket_connect("/invoices/live") as ws:
            assert ws.receive_json() == []

            invoice_id = client.post("/invoices", json=_payload()).json()["id"]
            pushed = ws.receive_json()
            assert [inv["id"] for inv in pushed] == [invoice_id]
            assert pushed[0]["customerName"] == "Priya Raman"

            client.delete(f"/invoices/{invoice_id}")
            assert ws.receive_json() == []

    def test_slow_reader_only_gets_latest_list(self, run, make_invoice):
        async def burst():
            queue = asyncio.Queue(maxsize=1)
            for number in ("1405", "1406", "1407"):
                offer_latest(queue, [make_invoice(number=number)])
            return queue.qsize(), await queue.get()

        size, pending = run(burst())
        assert size == 1
        assert [inv.invoice_number for inv in pending] == ["1407"]

    def test_reconnect_after_disconnect(self, client):
        with client.websocket_connect("/invoices/live") as ws:
            assert ws.receive_json() == []
        client.post("/invoices", json=_payload())
        with client.websocket_connect("/invoices/live") as ws:
            assert len(ws.receive_json()) == 1


class TestProducts:

    def test_default_catalog(self, client):
        products = client.get("/products").json()
        assert len(products) == 12
        assert products[0] == {
            "id": "1",
            "name": "Ready-made Card (Any Occasion)",
            "type": "READYMADE",
            "price": 250,
            "description": None,
        }

    def test_crud(self, client):
        created = client.post("/products", json={"name": "  Diwali Card ", "type": "PERSONALIZED", "price": 350})
        assert created.status_code == 201
        product = created.json()
        assert product["name"] == "Diwali Card"

        updated = client.put(f"/products/{product['id']}", json={"name": "Diwali Card XL", "type": "PERSONALIZED", "price": 400})
        assert updated.json()["price"] == 400

        assert client.delete(f"/products/{product['id']}").status_code == 204
        assert client.delete(f"/products/{product['id']}").status_code == 204
        assert all(p["id"] != product["id"] for p in client.get("/products").json())

    @pytest.mark.parametrize("body", [
        {"name": "   ", "price": 10},
        {"name": "Card", "price": -1},
    ])
    def test_editing_boundary_validation(self, client, body):
        assert client.post("/products", json=body).status_code == 400

    def test_update_unknown_product(self, client):
        assert client.put("/products/404", json={"name": "Card", "price": 1}).status_code == 404


class TestSettingsAndAnalytics:

    def test_settings_roundtrip(self, client):
        assert client.get("/settings").json()["companyName"] == "Happy Greeting"
        body = client.get("/settings").json()
        body["tagline"] = "Cards with care"
        assert client.put("/settings", json=body).status_code == 200
        assert client.get("/settings").json()["tagline"] == "Cards with care"

    def test_blank_company_email_is_saved(self, client):
        body = client.get("/settings").json()
        body["email"] = ""
        assert client.put("/settings", json=body).status_code == 200
        assert client.get("/settings").json()["email"] == ""
        assert client.get("/invoices/draft").json()["email"] == ""

    def test_analytics_summary(self, client):
        client.post("/invoices", json=_payload())
        client.post("/invoices", json=_payload(invoiceNumber="1406", amountPaid=0, date="2026-04-01"))
        summary = client.get("/analytics/summary").json()
        assert summary["totalRevenue"] == 1100
        assert summary["outstanding"] == 800
        assert summary["invoiceCount"] == 2
        assert summary["statusCounts"] == {"UNPAID": 1, "PARTIAL": 1, "PAID": 0}
        assert summary["monthlySales"] == [
            {"month": "2026-03", "amount": 550},
            {"month": "2026-04", "amount": 550},
        ]
