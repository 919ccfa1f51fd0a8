"""
Registro de ventas, compras e ingresos por factura

Cada operación combina un cambio de stock con su asiento en el libro de caja:
- Venta directa: descuenta stock y registra un ingreso (category="sale")
- Compra a proveedor: suma stock y registra un egreso (category="purchase")
- Factura: refleja cada línea como ingreso vinculado a la factura

Ventas y compras son todo-o-nada: stock y asiento se confirman en el mismo
commit. El reflejo de facturas es best-effort: si falla se registra en el log
y la factura, que es la fuente de verdad, queda creada igual.
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
import logging

from repcell.core.clock import Clock
from repcell.common import dates
from repcell.common.exceptions import ValidationError, UpstreamWriteFailure
from repcell.modules.accounting.models import Transaction
from repcell.modules.accounting.schemas import LedgerEntry, TransactionType
from repcell.modules.accounting.service import LedgerService, to_cents
from repcell.modules.inventory.service import InventoryService

logger = logging.getLogger(__name__)

SALE_CATEGORY = "sale"
PURCHASE_CATEGORY = "purchase"


class SalesRecorder:
    """Orquesta stock + libro de caja como una sola operación lógica"""

    def __init__(self, db: Session, clock: Clock):
        self.db = db
        self.clock = clock
        self.ledger = LedgerService(db, clock)
        self.inventory = InventoryService(db)

    def record_purchase(
        self,
        product_id: UUID,
        quantity: int,
        unit_cost: Decimal,
        supplier: Optional[str] = None,
        notes: Optional[str] = None
    ) -> Optional[Transaction]:
        """Compra: +stock y egreso por quantity * unit_cost."""
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")
        if unit_cost < 0:
            raise ValidationError("Unit cost must be zero or greater")

        try:
            product = self.inventory.get_product_for_update(product_id)
            self.inventory.increase_stock(product, quantity)

            amount = to_cents(Decimal(quantity) * Decimal(unit_cost))
            transaction = None
            # Una compra sin costo mueve stock pero no genera asiento
            if amount > 0:
                transaction = self.ledger.create_transaction(LedgerEntry(
                    type=TransactionType.EXPENSE,
                    amount=amount,
                    description=notes or f"Compra {product.name} x{quantity}",
                    category=PURCHASE_CATEGORY,
                    product_id=product.id,
                    quantity=quantity,
                    supplier=supplier or product.supplier,
                ), commit=False)

            self.db.commit()
        except HTTPException:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error registrando compra: {str(e)}"
            )

        if transaction is not None:
            self.db.refresh(transaction)
        logger.info(f"Purchase of {quantity} x {product_id} at {unit_cost} recorded")
        return transaction

    def record_sale(
        self,
        product_id: UUID,
        quantity: int,
        unit_price: Decimal,
        notes: Optional[str] = None
    ) -> Optional[Transaction]:
        """Venta: -stock (falla si no alcanza) e ingreso por quantity * unit_price."""
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")
        if unit_price < 0:
            raise ValidationError("Unit price must be zero or greater")

        try:
            product = self.inventory.get_product_for_update(product_id)
            self.inventory.decrease_stock(product, quantity)

            amount = to_cents(Decimal(quantity) * Decimal(unit_price))
            transaction = None
            if amount > 0:
                transaction = self.ledger.create_transaction(LedgerEntry(
                    type=TransactionType.INCOME,
                    amount=amount,
                    description=notes or f"Venta {product.name} x{quantity}",
                    category=SALE_CATEGORY,
                    product_id=product.id,
                    quantity=quantity,
                ), commit=False)

            self.db.commit()
        except HTTPException:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error registrando venta: {str(e)}"
            )

        if transaction is not None:
            self.db.refresh(transaction)
        logger.info(f"Sale of {quantity} x {product_id} at {unit_price} recorded")
        return transaction

    def record_invoice_income(self, invoice) -> List[Transaction]:
        """
        Reflejar las líneas de una factura ya confirmada como ingresos.

        Nunca lanza: ante cualquier error deshace los asientos, registra un
        UpstreamWriteFailure en el log y devuelve una lista vacía.
        """
        invoice_id = invoice.id
        business_date = dates.from_storage(invoice.created_at, self.clock.tz)
        created = []
        try:
            for item in invoice.items:
                amount = to_cents(Decimal(item.quantity) * Decimal(item.unit_price))
                if amount <= 0:
                    continue
                created.append(self.ledger.create_transaction(LedgerEntry(
                    date=business_date,
                    type=TransactionType.INCOME,
                    amount=amount,
                    description=f"Factura {invoice_id}: {item.description}",
                    category=SALE_CATEGORY,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    invoice_id=invoice_id,
                ), commit=False))
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            failure = UpstreamWriteFailure(invoice_id, e)
            logger.exception(str(failure))
            return []

        logger.info(f"Mirrored {len(created)} income entries for invoice {invoice_id}")
        return created
