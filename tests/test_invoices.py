"""
Tests de facturación

- Alta con total calculado y descuento de stock (sin bajar de 0)
- Reflejo de cada línea como ingreso en el libro de caja
- Tolerancia a fallas del reflejo: la factura se crea igual
- Ingreso facturado por rango, borrado y PDF
"""

from decimal import Decimal
from uuid import uuid4

from repcell.modules.accounting.models import Transaction, TransactionType
from repcell.modules.accounting.service import LedgerService
from repcell.modules.invoices.models import Invoice
from tests.conftest import money


def _invoice(client, items, **extra):
    payload = {"client_name": "Ana", "items": items}
    payload.update(extra)
    return client.post("/api/invoices/", json=payload)


class TestCreateInvoice:

    def test_total_and_stock(self, client, make_product, db_session):
        widget = make_product(name="Widget", quantity=2)

        response = _invoice(client, [
            {"product_id": str(widget.id), "description": "Widget", "quantity": 3, "unit_price": "10"},
            {"description": "Mano de obra", "quantity": 1, "unit_price": "40"},
        ], date="2025-03-14")
        assert response.status_code == 201
        invoice = response.json()
        assert money(invoice["total"]) == Decimal("70")
        assert invoice["created_at"].startswith("2025-03-14T00:00:00")
        assert [item["description"] for item in invoice["items"]] == ["Widget", "Mano de obra"]
        assert money(invoice["items"][0]["line_total"]) == Decimal("30")

        # Stock 2 - 3 queda en 0, nunca negativo
        db_session.expire_all()
        assert db_session.get(type(widget), widget.id).quantity == 0

    def test_mirrors_income_per_line(self, client, make_product, db_session):
        widget = make_product(name="Widget", quantity=10)

        invoice = _invoice(client, [
            {"product_id": str(widget.id), "description": "Widget", "quantity": 2, "unit_price": "25"},
            {"description": "Regalo", "quantity": 1, "unit_price": "0"},
        ], date="2025-03-14").json()

        entries = db_session.query(Transaction).all()
        assert len(entries) == 1
        entry = entries[0]
        assert entry.type == TransactionType.INCOME
        assert entry.amount == Decimal("50")
        assert entry.category == "sale"
        assert str(entry.invoice_id) == invoice["id"]
        assert entry.product_id == widget.id
        assert entry.quantity == 2

        # Fechado en el día de negocio de la factura
        daily = client.get("/api/accounting/daily", params={"date": "2025-03-14"}).json()
        assert money(daily["income"]) == Decimal("50")

    def test_default_date_is_clock_now(self, client):
        invoice = _invoice(client, [{"description": "Diagnóstico", "quantity": 1, "unit_price": "5"}]).json()
        assert invoice["created_at"].startswith("2025-03-15T12:00:00")

    def test_mirroring_failure_keeps_invoice(self, client, db_session, monkeypatch):
        def boom(self, entry, commit=True):
            raise RuntimeError("ledger unavailable")

        monkeypatch.setattr(LedgerService, "create_transaction", boom)

        response = _invoice(client, [{"description": "Pantalla", "quantity": 1, "unit_price": "150"}])
        assert response.status_code == 201
        assert db_session.query(Invoice).count() == 1
        assert db_session.query(Transaction).count() == 0

    def test_unknown_product_is_404(self, client, make_product, db_session):
        widget = make_product(quantity=5)

        response = _invoice(client, [
            {"product_id": str(widget.id), "description": "Widget", "quantity": 1, "unit_price": "10"},
            {"product_id": str(uuid4()), "description": "Fantasma", "quantity": 1, "unit_price": "10"},
        ])
        assert response.status_code == 404
        assert response.json()["message"] == "Product not found"

        # Nada se confirma: ni factura, ni stock, ni ingresos
        db_session.expire_all()
        assert db_session.query(Invoice).count() == 0
        assert db_session.query(Transaction).count() == 0
        assert db_session.get(type(widget), widget.id).quantity == 5

    def test_items_required(self, client):
        assert _invoice(client, []).status_code == 422

    def test_item_quantity_must_be_positive(self, client):
        response = _invoice(client, [{"description": "x", "quantity": 0, "unit_price": "1"}])
        assert response.status_code == 422

    def test_requires_admin(self, cashier_client):
        response = _invoice(cashier_client, [{"description": "x", "quantity": 1, "unit_price": "1"}])
        assert response.status_code == 403


class TestInvoiceQueries:

    def test_list_and_get(self, client):
        created = _invoice(client, [{"description": "Pin de carga", "quantity": 1, "unit_price": "12"}]).json()

        listed = client.get("/api/invoices/").json()
        assert [inv["id"] for inv in listed] == [created["id"]]

        fetched = client.get(f"/api/invoices/{created['id']}").json()
        assert fetched["client_name"] == "Ana"

    def test_get_unknown(self, client):
        response = client.get(f"/api/invoices/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["message"] == "Invoice not found"

    def test_income_range(self, client):
        _invoice(client, [{"description": "a", "quantity": 1, "unit_price": "100"}], date="2025-03-01")
        _invoice(client, [{"description": "b", "quantity": 2, "unit_price": "25"}], date="2025-03-10")
        _invoice(client, [{"description": "c", "quantity": 1, "unit_price": "999"}], date="2025-04-01")

        result = client.get(
            "/api/invoices/income/range", params={"from": "2025-03-01", "to": "2025-03-31"}
        ).json()
        assert money(result["total"]) == Decimal("150")
        assert result["count"] == 2
        assert result["from"].startswith("2025-03-01T00:00:00")

    def test_income_range_empty(self, client):
        result = client.get("/api/invoices/income/range").json()
        assert money(result["total"]) == Decimal("0")
        assert result["count"] == 0

    def test_delete(self, client, db_session):
        created = _invoice(client, [{"description": "x", "quantity": 1, "unit_price": "10"}]).json()

        response = client.delete(f"/api/invoices/{created['id']}")
        assert response.status_code == 200
        assert client.get(f"/api/invoices/{created['id']}").status_code == 404
        # El ingreso reflejado queda en el libro de caja
        assert db_session.query(Transaction).count() == 1

    def test_delete_unknown(self, client):
        assert client.delete(f"/api/invoices/{uuid4()}").status_code == 404

    def test_pdf(self, client):
        created = _invoice(client, [{"description": "Pantalla", "quantity": 1, "unit_price": "150"}],
                           notes="Garantía 30 días").json()

        response = client.get(f"/api/invoices/{created['id']}/pdf")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")
