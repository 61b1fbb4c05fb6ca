"""HTTP surface: routers, status codes and the spreadsheet export."""

from datetime import date
from decimal import Decimal


def _create_item(client, name="Widget", opening_stock="10", purchase_price="80"):
    response = client.post("/api/v1/inventory/items", json={
        "name": name, "opening_stock": opening_stock, "purchase_price": purchase_price, "sale_price": "100",
    })
    assert response.status_code == 200
    return response.json()


def _create_party(client, name="Acme Traders", party_type="customer", opening_balance="0"):
    response = client.post("/api/v1/parties/", json={
        "name": name, "party_type": party_type, "email": "accounts@acmetraders.in",
        "opening_balance": opening_balance,
    })
    assert response.status_code == 200
    return response.json()


def _invoice_payload(party_id, item_id, quantity="2", kind="sale", paid="0"):
    return {
        "invoice_number": "INV-100",
        "kind": kind,
        "invoice_date": date.today().isoformat(),
        "party_id": party_id,
        "paid_amount": paid,
        "lines": [{"item_id": item_id, "quantity": quantity, "rate": "100",
                   "discount_percent": "10", "tax_rate_percent": "18"}],
    }


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


class TestInventoryApi:

    def test_item_lifecycle(self, client):
        item = _create_item(client)
        assert Decimal(str(item["current_stock"])) == Decimal("10")

        response = client.put(f"/api/v1/inventory/items/{item['id']}", json={"sale_price": "120"})
        assert Decimal(str(response.json()["sale_price"])) == Decimal("120")

        assert client.delete(f"/api/v1/inventory/items/{item['id']}").status_code == 200
        assert client.get(f"/api/v1/inventory/items/{item['id']}").status_code == 404

        restored = client.post(f"/api/v1/inventory/items/{item['id']}/restore")
        assert restored.status_code == 200
        assert restored.json()["is_deleted"] is False

    def test_missing_item(self, client):
        assert client.get("/api/v1/inventory/items/999").status_code == 404
        assert client.post("/api/v1/inventory/items/999/restore").status_code == 404

    def test_stock_register(self, client):
        item = _create_item(client, opening_stock="10")
        party = _create_party(client)
        client.post("/api/v1/invoice/invoices", json=_invoice_payload(party["id"], item["id"], quantity="4"))

        today = date.today()
        response = client.get("/api/v1/inventory/stock-register",
                              params={"year": today.year, "month": today.month})
        assert response.status_code == 200
        row = response.json()["rows"][0]
        assert Decimal(str(row["opening_qty"])) == Decimal("10")
        assert Decimal(str(row["sale_qty"])) == Decimal("4")
        assert Decimal(str(row["closing_qty"])) == Decimal("6")

    def test_stock_register_rejects_unknown_filter(self, client):
        assert client.get("/api/v1/inventory/stock-register", params={"status": "sideways"}).status_code == 422

    def test_export(self, client):
        _create_item(client)
        response = client.get("/api/v1/inventory/stock-register/export")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
        assert "attachment" in response.headers["content-disposition"]
        assert response.content[:2] == b"PK"


class TestInvoiceApi:

    def test_create_and_fetch(self, client):
        item = _create_item(client)
        party = _create_party(client)

        response = client.post("/api/v1/invoice/invoices",
                               json=_invoice_payload(party["id"], item["id"], quantity="10", paid="1000"))
        assert response.status_code == 200
        body = response.json()
        assert Decimal(str(body["total_amount"])) == Decimal("1062")
        assert Decimal(str(body["balance_due"])) == Decimal("62")
        assert body["status"] == "partial"

        fetched = client.get(f"/api/v1/invoice/invoices/{body['id']}")
        assert fetched.status_code == 200
        assert len(fetched.json()["lines"]) == 1

        listed = client.get("/api/v1/invoice/invoices", params={"status": "partial"})
        assert [i["id"] for i in listed.json()] == [body["id"]]

    def test_insufficient_stock_is_a_client_error(self, client):
        item = _create_item(client, name="Bolt", opening_stock="1")
        party = _create_party(client)

        response = client.post("/api/v1/invoice/invoices", json=_invoice_payload(party["id"], item["id"], quantity="5"))

        assert response.status_code == 400
        assert "Bolt" in response.json()["detail"]

    def test_missing_party(self, client):
        item = _create_item(client)
        payload = _invoice_payload(None, item["id"])
        response = client.post("/api/v1/invoice/invoices", json=payload)
        assert response.status_code == 400
        assert response.json()["detail"] == "Please select a party"

    def test_due_date_before_invoice_date(self, client):
        item = _create_item(client)
        party = _create_party(client)
        payload = _invoice_payload(party["id"], item["id"])
        payload["due_date"] = "2000-01-01"
        assert client.post("/api/v1/invoice/invoices", json=payload).status_code == 422

    def test_payment_and_delete(self, client):
        item = _create_item(client)
        party = _create_party(client)
        invoice = client.post("/api/v1/invoice/invoices",
                              json=_invoice_payload(party["id"], item["id"], quantity="1")).json()

        paid = client.post(f"/api/v1/invoice/invoices/{invoice['id']}/payments",
                           json={"amount": "106", "payment_date": date.today().isoformat()})
        assert paid.json()["status"] == "paid"

        assert client.delete(f"/api/v1/invoice/invoices/{invoice['id']}").status_code == 200
        assert client.get(f"/api/v1/invoice/invoices/{invoice['id']}").status_code == 404
        assert client.delete(f"/api/v1/invoice/invoices/{invoice['id']}").status_code == 404

        item_after = client.get(f"/api/v1/inventory/items/{item['id']}").json()
        assert Decimal(str(item_after["current_stock"])) == Decimal("10")

    def test_update_missing_invoice(self, client):
        assert client.put("/api/v1/invoice/invoices/77", json={"notes": "x"}).status_code == 404

    def test_errors_from_storage_map_to_status_codes(self, client):
        item = _create_item(client)
        party = _create_party(client)
        invoice = client.post("/api/v1/invoice/invoices",
                              json=_invoice_payload(party["id"], item["id"], quantity="1", paid="106")).json()
        assert invoice["status"] == "paid"

        again = client.post(f"/api/v1/invoice/invoices/{invoice['id']}/payments",
                            json={"amount": "10", "payment_date": date.today().isoformat()})
        assert again.status_code == 400
        assert "already paid" in again.json()["detail"]

        edit = client.put(f"/api/v1/invoice/invoices/{invoice['id']}", json={"due_date": "2000-01-01"})
        assert edit.status_code == 400

        missing = client.post("/api/v1/invoice/invoices/999/payments",
                              json={"amount": "10", "payment_date": date.today().isoformat()})
        assert missing.status_code == 404
        assert missing.json()["detail"] == "Invoice with ID 999 not found"

    def test_preview(self, client):
        response = client.post("/api/v1/invoice/preview", json={
            "kind": "sale",
            "paid_amount": "1000",
            "lines": [
                {"item_id": 1, "quantity": "10", "rate": "100", "discount_percent": "10", "tax_rate_percent": "18"},
                {"item_id": 2, "quantity": "10", "rate": "100", "discount_percent": "10", "tax_rate_percent": "18"},
            ],
        })
        assert response.status_code == 200
        body = response.json()
        assert Decimal(str(body["totals"]["grand_total"])) == Decimal("2124")
        assert Decimal(str(body["payment"]["balance_due"])) == Decimal("1124")
        assert body["payment"]["status"] == "partial"
        assert len(body["tax_breakdown"]) == 1


class TestPartyApi:

    def test_balances(self, client):
        item = _create_item(client, opening_stock="100")
        customer = _create_party(client, opening_balance="500")
        supplier = _create_party(client, name="Mill", party_type="supplier", opening_balance="200")
        client.post("/api/v1/invoice/invoices", json=_invoice_payload(customer["id"], item["id"], quantity="10"))

        payment = client.post("/api/v1/parties/payments", json={
            "party_id": customer["id"], "direction": "payment_in", "amount": "62",
            "payment_date": date.today().isoformat(),
        })
        assert payment.status_code == 200
        assert payment.json()["direction"] == "in"

        balance = client.get(f"/api/v1/parties/{customer['id']}/balance").json()
        assert Decimal(str(balance["net_due"])) == Decimal("1500")
        assert balance["label"] == "receivable"

        portfolio = client.get("/api/v1/parties/balances").json()
        assert Decimal(str(portfolio["total_receivable"])) == Decimal("1500")
        assert Decimal(str(portfolio["total_payable"])) == Decimal("200")
        assert Decimal(str(portfolio["net_balance"])) == Decimal("1300")
        assert portfolio["net_label"] == "net receivable"

        payments = client.get(f"/api/v1/parties/{customer['id']}/payments").json()
        assert len(payments) == 1
        assert client.get(f"/api/v1/parties/{supplier['id']}").status_code == 200

    def test_unknown_direction(self, client):
        party = _create_party(client)
        response = client.post("/api/v1/parties/payments", json={
            "party_id": party["id"], "direction": "sideways", "amount": "1",
            "payment_date": date.today().isoformat(),
        })
        assert response.status_code == 422

    def test_missing_party(self, client):
        assert client.get("/api/v1/parties/999").status_code == 404
        assert client.get("/api/v1/parties/999/balance").status_code == 404


class TestReportsApi:

    def test_dashboard(self, client):
        item = _create_item(client, opening_stock="12")
        party = _create_party(client)
        client.post("/api/v1/invoice/invoices", json=_invoice_payload(party["id"], item["id"], quantity="10"))

        response = client.get("/api/v1/reports/dashboard")
        assert response.status_code == 200
        body = response.json()
        assert Decimal(str(body["metrics"]["sales_this_month"])) == Decimal("1062")
        assert len(body["monthly"]) == 9
        assert body["item_count"] == 1
        assert body["party_count"] == 1
        assert Decimal(str(body["stock_value"])) == Decimal("160")
        assert [i["status"] for i in body["low_stock"]] == ["low"]
        assert Decimal(str(body["quick_stats"]["total_receivables"])) == Decimal("1062")

    def test_low_stock_and_overdue(self, client):
        _create_item(client, opening_stock="0")
        assert [i["status"] for i in client.get("/api/v1/reports/low-stock").json()] == ["out"]
        assert client.get("/api/v1/reports/overdue").json() == []
        assert client.get("/api/v1/reports/quick-stats").status_code == 200
