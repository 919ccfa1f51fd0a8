from fastapi import HTTPException, status
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import func
from decimal import Decimal
from typing import List
from uuid import UUID
import logging

from repcell.core.clock import Clock
from repcell.common import dates
from repcell.common.exceptions import NotFoundError
from repcell.modules.invoices.models import Invoice, InvoiceItem
from repcell.modules.invoices.schemas import (
    InvoiceCreate, InvoiceOut, InvoiceItemOut, InvoiceIncomeOut
)
from repcell.modules.inventory.service import InventoryService
from repcell.modules.accounting.recorder import SalesRecorder

logger = logging.getLogger(__name__)


class InvoiceService:
    def __init__(self, db: Session, clock: Clock):
        self.db = db
        self.clock = clock
        self.tz = clock.tz

    def create_invoice(self, invoice_data: InvoiceCreate) -> Invoice:
        """
        Crear factura.

        La factura y el descuento de stock se confirman juntos. Después se
        reflejan los ingresos en el libro de caja; si eso falla la factura
        queda creada igual.
        """
        business_date = dates.normalize(invoice_data.date, self.tz) or self.clock.now()
        inventory = InventoryService(self.db)

        try:
            # Bloquear los productos vinculados antes de crear la factura (404 si no existen)
            products = {}
            for item_data in invoice_data.items:
                if item_data.product_id and item_data.product_id not in products:
                    products[item_data.product_id] = inventory.get_product_for_update(item_data.product_id)

            invoice = Invoice(
                client_name=invoice_data.client_name,
                notes=invoice_data.notes,
                created_at=dates.to_storage(business_date),
            )

            total = Decimal("0")
            for position, item_data in enumerate(invoice_data.items):
                item = InvoiceItem(
                    product_id=item_data.product_id,
                    position=position,
                    description=item_data.description,
                    quantity=item_data.quantity,
                    unit_price=item_data.unit_price,
                )
                invoice.items.append(item)
                total += Decimal(item_data.quantity) * Decimal(item_data.unit_price)
            invoice.total = total

            self.db.add(invoice)

            # Descontar stock de los ítems con producto (sin bajar de 0)
            for item_data in invoice_data.items:
                if item_data.product_id:
                    inventory.consume_stock(products[item_data.product_id], item_data.quantity)

            self.db.commit()
            self.db.refresh(invoice)

        except HTTPException:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creando factura: {str(e)}"
            )

        logger.info(f"Created invoice {invoice.id} with {len(invoice.items)} items, total {invoice.total}")

        SalesRecorder(self.db, self.clock).record_invoice_income(invoice)
        return self.get_invoice(invoice.id)

    def list_invoices(self) -> List[Invoice]:
        return self.db.query(Invoice).options(
            selectinload(Invoice.items).joinedload(InvoiceItem.product)
        ).order_by(Invoice.created_at.desc()).all()

    def get_invoice(self, invoice_id: UUID) -> Invoice:
        invoice = self.db.query(Invoice).options(
            selectinload(Invoice.items).joinedload(InvoiceItem.product)
        ).filter(Invoice.id == invoice_id).first()
        if not invoice:
            raise NotFoundError("Invoice not found")
        return invoice

    def delete_invoice(self, invoice_id: UUID) -> None:
        """
        Borrar factura.

        Los ingresos ya reflejados quedan en el libro de caja con su
        invoice_id, de modo que los reportes siguen sin contarlos dos veces.
        """
        invoice = self.db.query(Invoice).filter(Invoice.id == invoice_id).first()
        if not invoice:
            raise NotFoundError("Invoice not found")

        self.db.delete(invoice)
        self.db.commit()
        logger.info(f"Deleted invoice {invoice_id}")

    def income_range(self, date_from=None, date_to=None) -> InvoiceIncomeOut:
        """Total facturado y cantidad de facturas en [date_from, date_to]."""
        start = dates.normalize(date_from, self.tz) or dates.EPOCH.astimezone(self.tz)
        end = dates.normalize(date_to, self.tz) or self.clock.now()

        row = self.db.query(
            func.coalesce(func.sum(Invoice.total), 0).label('total'),
            func.count(Invoice.id).label('count')
        ).filter(
            Invoice.created_at >= dates.to_storage(start),
            Invoice.created_at <= dates.to_storage(end)
        ).one()

        return InvoiceIncomeOut(
            date_from=start,
            date_to=end,
            total=Decimal(str(row.total or 0)),
            count=row.count or 0
        )

    def to_out(self, invoice: Invoice) -> InvoiceOut:
        return InvoiceOut(
            id=invoice.id,
            client_name=invoice.client_name,
            notes=invoice.notes,
            total=invoice.total,
            created_at=dates.from_storage(invoice.created_at, self.tz),
            items=[
                InvoiceItemOut(
                    product_id=item.product_id,
                    product_name=item.product.name if item.product else None,
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    line_total=item.line_total,
                )
                for item in invoice.items
            ]
        )
