"""
Tests de reportes financieros

- Resumen por período sin doble conteo de ventas facturadas
- Buckets día / semana ISO / mes sobre la fecha local
- Productos más vendidos y egresos por categoría
- Exportación CSV y PDF
"""

from decimal import Decimal
from uuid import UUID

from repcell.common import dates
from repcell.modules.accounting.models import Transaction
from repcell.modules.reports.services.financial import FinancialReportService
from tests.conftest import money

RANGE = {"from": "2025-03-01", "to": "2025-03-31"}


def _invoice(client, items, date):
    response = client.post("/api/invoices/", json={"items": items, "date": date})
    assert response.status_code == 201
    return response.json()


def _tx(client, date, type_, amount, category=None, description="mov"):
    response = client.post("/api/accounting/transactions", json={
        "date": date, "type": type_, "amount": amount,
        "description": description, "category": category
    })
    assert response.status_code == 201


# ===== TESTS DE RESUMEN =====

class TestSummary:

    def test_invoice_income_counted_once(self, client, db_session):
        invoice = _invoice(client, [
            {"description": "Pantalla", "quantity": 1, "unit_price": "100"},
            {"description": "Mano de obra", "quantity": 1, "unit_price": "50"},
        ], "2025-03-10")

        # La factura se refleja en el libro de caja, una entrada por línea
        mirrored = db_session.query(Transaction).filter(
            Transaction.invoice_id == UUID(invoice["id"])
        ).all()
        assert sorted(tx.amount for tx in mirrored) == [Decimal("50"), Decimal("100")]

        result = client.get("/api/reports/summary", params=RANGE).json()
        assert result["granularity"] == "day"
        assert len(result["rows"]) == 1
        row = result["rows"][0]
        assert row["bucket"] == "2025-03-10"
        assert money(row["income"]) == Decimal("150")

    def test_manual_income_and_expense(self, client):
        _invoice(client, [{"description": "Pantalla", "quantity": 1, "unit_price": "150"}], "2025-03-10")
        _tx(client, "2025-03-10", "income", "20")
        _tx(client, "2025-03-10", "expense", "30")
        _tx(client, "2025-03-12", "expense", "5")

        rows = client.get("/api/reports/summary", params=RANGE).json()["rows"]
        assert [row["bucket"] for row in rows] == ["2025-03-10", "2025-03-12"]
        assert money(rows[0]["income"]) == Decimal("170")
        assert money(rows[0]["expense"]) == Decimal("30")
        assert money(rows[0]["net"]) == Decimal("140")
        assert money(rows[1]["net"]) == Decimal("-5")

    def test_deleted_invoice_income_stays_excluded(self, client):
        invoice = _invoice(client, [{"description": "x", "quantity": 1, "unit_price": "80"}], "2025-03-10")
        client.delete(f"/api/invoices/{invoice['id']}")

        assert client.get("/api/reports/summary", params=RANGE).json()["rows"] == []

    def test_week_and_month_buckets(self, client):
        # 2025-03-15 cae en la semana ISO 11
        _tx(client, "2025-03-15", "income", "10")
        _tx(client, "2025-03-03", "income", "10")

        weeks = client.get("/api/reports/summary", params={**RANGE, "granularity": "week"}).json()
        assert [row["bucket"] for row in weeks["rows"]] == ["2025-W10", "2025-W11"]

        months = client.get("/api/reports/summary", params={**RANGE, "granularity": "month"}).json()
        assert [row["bucket"] for row in months["rows"]] == ["2025-03"]
        assert money(months["rows"][0]["income"]) == Decimal("20")

    def test_iso_week_year(self, client):
        # 2024-12-30 pertenece a la semana 1 de 2025
        _tx(client, "2024-12-30", "expense", "1")
        result = client.get("/api/reports/summary", params={
            "from": "2024-12-01", "to": "2025-01-31", "granularity": "week"
        }).json()
        assert [row["bucket"] for row in result["rows"]] == ["2025-W1"]

    def test_weeks_sorted_chronologically(self, client):
        # Semana ISO 9 y 10: W9 va antes que W10 aunque el texto ordene al revés
        _tx(client, "2025-03-05", "income", "10")
        _tx(client, "2025-02-26", "income", "20")
        params = {"from": "2025-02-01", "to": "2025-03-31", "granularity": "week"}

        rows = client.get("/api/reports/summary", params=params).json()["rows"]
        assert [row["bucket"] for row in rows] == ["2025-W9", "2025-W10"]
        assert money(rows[0]["income"]) == Decimal("20")

        lines = client.get("/api/reports/summary.csv", params=params).text.strip().splitlines()
        assert [line.split(",")[0] for line in lines[1:]] == ["2025-W9", "2025-W10"]

    def test_unknown_granularity_falls_back_to_day(self, client):
        result = client.get("/api/reports/summary", params={**RANGE, "granularity": "year"}).json()
        assert result["granularity"] == "day"

    def test_bucket_uses_local_date(self, client):
        _invoice(client, [{"description": "x", "quantity": 1, "unit_price": "9"}], "2025-03-15T23:30:00-03:00")
        rows = client.get("/api/reports/summary", params=RANGE).json()["rows"]
        assert [row["bucket"] for row in rows] == ["2025-03-15"]

    def test_inverted_range_is_empty(self, client):
        _tx(client, "2025-03-10", "income", "10")
        result = client.get("/api/reports/summary", params={"from": "2025-03-31", "to": "2025-03-01"}).json()
        assert result["rows"] == []

    def test_default_range_until_now(self, db_session, clock):
        result = FinancialReportService(db_session, clock).get_summary()
        assert result["from"] == dates.EPOCH
        assert result["to"] == clock.now()
        assert result["rows"] == []


# ===== TESTS DE PRODUCTOS MÁS VENDIDOS =====

class TestTopProducts:

    def test_quantity_and_value(self, client, make_product):
        widget = make_product(name="Widget", quantity=10)
        _invoice(client, [
            {"product_id": str(widget.id), "description": "Widget", "quantity": 3, "unit_price": "10"}
        ], "2025-03-10")

        result = client.get("/api/reports/top-products", params=RANGE).json()
        assert result["sort_by"] == "quantity"
        assert len(result["rows"]) == 1
        row = result["rows"][0]
        assert row["name"] == "Widget"
        assert row["quantity"] == 3
        assert money(row["value"]) == Decimal("30")

    def test_two_invoices_same_product(self, client, make_product):
        widget = make_product(name="widget", quantity=10)
        line = {"product_id": str(widget.id), "description": "widget", "unit_price": "10"}
        _invoice(client, [{**line, "quantity": 2}], "2025-03-10")
        _invoice(client, [{**line, "quantity": 1}], "2025-03-11")
        _invoice(client, [{"description": "Funda", "quantity": 1, "unit_price": "50"}], "2025-03-11")

        rows = client.get("/api/reports/top-products", params={**RANGE, "sort_by": "quantity"}).json()["rows"]
        assert rows[0]["name"] == "widget"
        assert rows[0]["quantity"] == 3
        assert money(rows[0]["value"]) == Decimal("30")

    def test_sort_by_value(self, client):
        _invoice(client, [
            {"description": "Funda", "quantity": 5, "unit_price": "2"},
            {"description": "Pantalla", "quantity": 1, "unit_price": "100"},
        ], "2025-03-10")

        by_quantity = client.get("/api/reports/top-products", params=RANGE).json()["rows"]
        assert [row["name"] for row in by_quantity] == ["Funda", "Pantalla"]

        by_value = client.get("/api/reports/top-products", params={**RANGE, "sort_by": "value"}).json()["rows"]
        assert [row["name"] for row in by_value] == ["Pantalla", "Funda"]

    def test_groups_across_invoices(self, client):
        _invoice(client, [{"description": "Funda", "quantity": 1, "unit_price": "2"}], "2025-03-10")
        _invoice(client, [{"description": "Funda", "quantity": 2, "unit_price": "3"}], "2025-03-11")

        rows = client.get("/api/reports/top-products", params=RANGE).json()["rows"]
        assert len(rows) == 1
        assert rows[0]["quantity"] == 3
        assert money(rows[0]["value"]) == Decimal("8")

    def test_prefers_current_product_name(self, client, make_product, db_session):
        widget = make_product(name="Widget", quantity=10)
        _invoice(client, [
            {"product_id": str(widget.id), "description": "Widget viejo", "quantity": 1, "unit_price": "1"}
        ], "2025-03-10")
        widget.name = "Widget Pro"
        db_session.commit()

        rows = client.get("/api/reports/top-products", params=RANGE).json()["rows"]
        assert rows[0]["name"] == "Widget Pro"

    def test_limit_is_clamped(self, client):
        _invoice(client, [
            {"description": f"item {i}", "quantity": i + 1, "unit_price": "1"} for i in range(3)
        ], "2025-03-10")

        assert len(client.get("/api/reports/top-products", params={**RANGE, "limit": 0}).json()["rows"]) == 1
        assert len(client.get("/api/reports/top-products", params={**RANGE, "limit": 500}).json()["rows"]) == 3
        assert len(client.get("/api/reports/top-products", params={**RANGE, "limit": 2}).json()["rows"]) == 2


# ===== TESTS DE EGRESOS POR CATEGORÍA =====

class TestExpensesByCategory:

    def test_grouped_and_sorted(self, client):
        _tx(client, "2025-03-05", "expense", "100", category="rent")
        _tx(client, "2025-03-06", "expense", "20", category="utilities")
        _tx(client, "2025-03-07", "expense", "15")
        _tx(client, "2025-03-08", "expense", "10", category="utilities")
        _tx(client, "2025-03-08", "income", "999", category="rent")

        result = client.get("/api/reports/expenses-by-category", params=RANGE).json()
        assert [(row["category"], money(row["total"])) for row in result["rows"]] == [
            ("rent", Decimal("100")),
            ("utilities", Decimal("30")),
            ("uncategorized", Decimal("15")),
        ]
        assert money(result["total"]) == Decimal("145")

    def test_purchases_show_as_expense(self, client, make_product):
        widget = make_product(quantity=0)
        client.post(f"/api/inventory/{widget.id}/purchase", json={"quantity": 2, "unit_cost": "7"})

        rows = client.get("/api/reports/expenses-by-category").json()["rows"]
        assert [row["category"] for row in rows] == ["purchase"]
        assert money(rows[0]["total"]) == Decimal("14")


# ===== TESTS DE EXPORTACIÓN =====

class TestExports:

    def test_summary_csv(self, client):
        _tx(client, "2025-03-10", "income", "12.50")

        response = client.get("/api/reports/summary.csv", params=RANGE)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment; filename=summary.csv" in response.headers["content-disposition"]
        lines = response.text.strip().splitlines()
        assert lines[0] == "bucket,income,expense,net"
        assert lines[1] == "2025-03-10,12.50,0,12.50"

    def test_empty_csv_has_header(self, client):
        response = client.get("/api/reports/expenses-by-category.csv", params=RANGE)
        assert response.text.strip() == "category,total"

    def test_top_products_csv(self, client):
        _invoice(client, [{"description": "Funda, negra", "quantity": 2, "unit_price": "3"}], "2025-03-10")
        response = client.get("/api/reports/top-products.csv", params=RANGE)
        lines = response.text.strip().splitlines()
        assert lines[0] == "name,quantity,value"
        assert lines[1] == '"Funda, negra",2,6.00'

    def test_summary_pdf(self, client):
        _tx(client, "2025-03-10", "income", "12.50")
        response = client.get("/api/reports/summary.pdf", params={**RANGE, "granularity": "month"})
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")
