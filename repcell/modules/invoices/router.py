from fastapi import APIRouter, Depends, Query, Response, status
from typing import List, Optional
from uuid import UUID

from repcell.dependencies.dbDependencies import db_dependency, clock_dependency
from repcell.modules.auth.dependencies import require_admin
from repcell.modules.auth.schemas import AuthContext
from repcell.common.params import date_param
from repcell.modules.accounting.schemas import MessageOut
from repcell.modules.invoices.service import InvoiceService
from repcell.modules.invoices.schemas import InvoiceCreate, InvoiceOut, InvoiceIncomeOut
from repcell.modules.reports.utils.pdf import create_invoice_pdf_response

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.get("/", response_model=List[InvoiceOut])
def list_invoices(
    db: db_dependency,
    clock: clock_dependency,
    auth_context: AuthContext = Depends(require_admin)
):
    """List invoices, newest first."""
    service = InvoiceService(db, clock)
    return [service.to_out(invoice) for invoice in service.list_invoices()]


@router.post("/", response_model=InvoiceOut, status_code=status.HTTP_201_CREATED)
def create_invoice(
    invoice_data: InvoiceCreate,
    db: db_dependency,
    clock: clock_dependency,
    auth_context: AuthContext = Depends(require_admin)
):
    """
    Create an invoice.

    Linked products lose stock (never below zero) and each line is recorded
    as income in the cash ledger.
    """
    service = InvoiceService(db, clock)
    return service.to_out(service.create_invoice(invoice_data))


@router.get("/income/range", response_model=InvoiceIncomeOut)
def invoice_income(
    db: db_dependency,
    clock: clock_dependency,
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    auth_context: AuthContext = Depends(require_admin)
):
    """Invoiced total and invoice count over a period."""
    return InvoiceService(db, clock).income_range(
        date_param(date_from, "from"), date_param(date_to, "to")
    )


@router.get("/{invoice_id}", response_model=InvoiceOut)
def get_invoice(
    invoice_id: UUID,
    db: db_dependency,
    clock: clock_dependency,
    auth_context: AuthContext = Depends(require_admin)
):
    service = InvoiceService(db, clock)
    return service.to_out(service.get_invoice(invoice_id))


@router.get("/{invoice_id}/pdf", response_model=None)
def get_invoice_pdf(
    invoice_id: UUID,
    db: db_dependency,
    clock: clock_dependency,
    auth_context: AuthContext = Depends(require_admin)
) -> Response:
    """Printable invoice."""
    service = InvoiceService(db, clock)
    invoice = service.to_out(service.get_invoice(invoice_id))
    return create_invoice_pdf_response(invoice.model_dump())


@router.delete("/{invoice_id}", response_model=MessageOut)
def delete_invoice(
    invoice_id: UUID,
    db: db_dependency,
    clock: clock_dependency,
    auth_context: AuthContext = Depends(require_admin)
):
    InvoiceService(db, clock).delete_invoice(invoice_id)
    return MessageOut(message="Invoice deleted")
