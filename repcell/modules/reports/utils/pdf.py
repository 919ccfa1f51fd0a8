"""
PDF rendering for reports and invoices (reportlab canvas).
"""

import io
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from fastapi import Response
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from repcell.modules.reports.utils import format_money

BUSINESS_NAME = "RepCell"
LINE_HEIGHT = 16
BOTTOM_MARGIN = 0.8 * inch


def _pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"inline; filename={filename}"}
    )


def _header(c: canvas.Canvas, title: str, lines: Sequence[str]) -> float:
    """Draw the title block and return the next free y position."""
    width, height = A4
    y = height - 0.8 * inch
    c.setFont("Helvetica-Bold", 18)
    c.drawCentredString(width / 2, y, title)
    y -= 0.45 * inch
    c.setFont("Helvetica", 11)
    for line in lines:
        c.drawString(0.75 * inch, y, line)
        y -= LINE_HEIGHT
    return y - 0.2 * inch


def _table(
    c: canvas.Canvas,
    y: float,
    headers: Sequence[str],
    positions: Sequence[float],
    rows: List[Sequence[str]]
) -> float:
    """Draw a simple column table, breaking pages as needed."""
    width, height = A4

    def draw_headers(top):
        c.setFont("Helvetica-Bold", 10)
        for text, x in zip(headers, positions):
            c.drawString(x * inch, top, text)
        c.line(0.75 * inch, top - 4, width - 0.75 * inch, top - 4)
        c.setFont("Helvetica", 10)
        return top - LINE_HEIGHT - 2

    y = draw_headers(y)
    for row in rows:
        if y < BOTTOM_MARGIN:
            c.showPage()
            y = draw_headers(height - 0.8 * inch)
        for text, x in zip(row, positions):
            c.drawString(x * inch, y, str(text))
        y -= LINE_HEIGHT
    return y


def create_summary_pdf_response(
    report_data: Dict[str, Any],
    filename: str = "summary.pdf"
) -> Response:
    """Financial summary: title, period, granularity and one line per bucket."""
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle("Resumen financiero")

    y = _header(c, "Resumen financiero", [
        f"Período: {report_data['from'].isoformat()} - {report_data['to'].isoformat()}",
        f"Granularidad: {report_data['granularity']}",
    ])
    _table(
        c, y,
        ["Bucket", "Ingresos", "Gastos", "Neto"],
        [0.75, 2.75, 4.25, 5.75],
        [
            [row["bucket"], format_money(row["income"]), format_money(row["expense"]), format_money(row["net"])]
            for row in report_data["rows"]
        ]
    )

    c.showPage()
    c.save()
    return _pdf_response(buffer.getvalue(), filename)


def create_invoice_pdf_response(
    invoice: Dict[str, Any],
    filename: Optional[str] = None
) -> Response:
    """Printable invoice with its line items and total."""
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Factura {invoice['id']}")

    y = _header(c, f"{BUSINESS_NAME} - Factura", [
        f"Factura: {invoice['id']}",
        f"Fecha: {invoice['created_at'].strftime('%Y-%m-%d %H:%M')}",
        f"Cliente: {invoice.get('client_name') or ''}",
    ])
    y = _table(
        c, y,
        ["Descripción", "Cant.", "Precio", "Importe"],
        [0.75, 4.5, 5.25, 6.25],
        [
            [
                item["description"][:60],
                item["quantity"],
                format_money(item["unit_price"]),
                format_money(Decimal(item["quantity"]) * Decimal(item["unit_price"])),
            ]
            for item in invoice["items"]
        ]
    )

    width, _ = A4
    c.line(0.75 * inch, y + 4, width - 0.75 * inch, y + 4)
    c.setFont("Helvetica-Bold", 12)
    c.drawString(5.25 * inch, y - LINE_HEIGHT, f"Total: {format_money(invoice['total'])}")
    if invoice.get("notes"):
        c.setFont("Helvetica", 10)
        c.drawString(0.75 * inch, y - 2.5 * LINE_HEIGHT, f"Notas: {invoice['notes']}")

    c.showPage()
    c.save()
    return _pdf_response(buffer.getvalue(), filename or f"invoice-{invoice['id']}.pdf")
