"""
Servicio del libro de caja (Ledger Store)

Único punto de escritura de Transaction y CashSession:
- Alta, listado filtrado y borrado de movimientos
- Lectura y upsert atómico del saldo de apertura por día
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import desc
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
from uuid import UUID
import logging

from repcell.core.clock import Clock
from repcell.core.config import settings
from repcell.common import dates
from repcell.common.exceptions import ValidationError, NotFoundError
from repcell.modules.accounting.models import Transaction, CashSession, TransactionType
from repcell.modules.accounting.schemas import (
    TransactionCreate, LedgerEntry, TransactionOut, TransactionFilters
)

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_cents(value) -> Decimal:
    """Redondear un monto a centavos, la precisión de la columna amount."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


class LedgerService:
    """Persistencia de movimientos y sesiones de caja"""

    def __init__(self, db: Session, clock: Clock):
        self.db = db
        self.clock = clock
        self.tz = clock.tz

    # ===== TRANSACTIONS =====

    def entry_from_request(self, data: TransactionCreate) -> LedgerEntry:
        """Build an internal entry from the HTTP payload, normalizing the date."""
        return LedgerEntry(
            date=dates.normalize(data.date, self.tz),
            type=data.type,
            amount=data.amount,
            description=data.description,
            category=data.category,
        )

    def create_transaction(self, entry: LedgerEntry, commit: bool = True) -> Transaction:
        """
        Registrar un movimiento.

        Con commit=False solo hace flush, para que el llamador confirme el
        movimiento junto con otros cambios (stock) en la misma transacción.
        """
        description = (entry.description or "").strip()
        if not description:
            raise ValidationError("Description required")
        amount = to_cents(entry.amount) if entry.amount is not None else None
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be greater than 0")

        when = dates.normalize(entry.date, self.tz) or self.clock.now()

        transaction = Transaction(
            date=dates.to_storage(when),
            type=TransactionType(entry.type.value),
            amount=amount,
            description=description,
            category=entry.category,
            product_id=entry.product_id,
            quantity=entry.quantity,
            invoice_id=entry.invoice_id,
            supplier=entry.supplier,
        )

        self.db.add(transaction)
        if commit:
            try:
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=f"Error registrando movimiento: {str(e)}"
                )
            self.db.refresh(transaction)
        else:
            self.db.flush()

        logger.info(
            f"Ledger {transaction.type.value} {transaction.amount} "
            f"on {dates.date_key(when, self.tz)}: {description}"
        )
        return transaction

    def list_transactions(self, filters: TransactionFilters) -> List[Transaction]:
        """Movimientos ordenados por fecha desc y luego por orden de alta desc."""
        query = self.db.query(Transaction).options(joinedload(Transaction.product))

        if filters.date_from:
            query = query.filter(Transaction.date >= dates.to_storage(filters.date_from))
        if filters.date_to:
            query = query.filter(Transaction.date <= dates.to_storage(filters.date_to))
        if filters.type:
            query = query.filter(Transaction.type == TransactionType(filters.type.value))
        if filters.category:
            query = query.filter(Transaction.category == filters.category)

        limit = min(filters.limit or settings.TRANSACTION_LIST_MAX, settings.TRANSACTION_LIST_MAX)

        return query.order_by(
            desc(Transaction.date), desc(Transaction.created_at)
        ).limit(limit).all()

    def list_window(self, start, end) -> List[Transaction]:
        """Movimientos con start <= date < end (instantes con zona)."""
        return self.db.query(Transaction).options(joinedload(Transaction.product)).filter(
            Transaction.date >= dates.to_storage(start),
            Transaction.date < dates.to_storage(end)
        ).order_by(desc(Transaction.date), desc(Transaction.created_at)).all()

    def delete_transaction(self, transaction_id: UUID) -> None:
        transaction = self.db.query(Transaction).filter(Transaction.id == transaction_id).first()
        if not transaction:
            raise NotFoundError("Transaction not found")

        self.db.delete(transaction)
        self.db.commit()
        logger.info(f"Deleted transaction {transaction_id}")

    def to_out(self, transaction: Transaction) -> TransactionOut:
        return TransactionOut(
            id=transaction.id,
            date=dates.from_storage(transaction.date, self.tz),
            type=transaction.type.value,
            amount=transaction.amount,
            description=transaction.description,
            category=transaction.category,
            product_id=transaction.product_id,
            product_name=transaction.product.name if transaction.product else None,
            quantity=transaction.quantity,
            invoice_id=transaction.invoice_id,
            supplier=transaction.supplier,
            created_at=dates.from_storage(transaction.created_at, self.tz),
        )

    # ===== CASH SESSIONS =====

    def get_cash_session(self, date_key: str) -> Optional[CashSession]:
        return self.db.query(CashSession).filter(CashSession.date_key == date_key).first()

    def upsert_cash_session(
        self,
        date_key: str,
        opening_balance: Decimal,
        notes: Optional[str] = None
    ) -> CashSession:
        """Crear o sobrescribir el saldo de apertura del día en una sola sentencia."""
        if opening_balance is None or opening_balance < 0:
            raise ValidationError("Opening balance must be zero or greater")

        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Upsert no soportado para el motor '{dialect}'"
            )

        now = dates.utcnow()
        stmt = insert(CashSession).values(
            date_key=date_key,
            opening_balance=opening_balance,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[CashSession.date_key],
            set_={
                "opening_balance": stmt.excluded.opening_balance,
                "notes": stmt.excluded.notes,
                "updated_at": now,
            }
        )

        try:
            self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error guardando sesión de caja: {str(e)}"
            )

        logger.info(f"Cash session {date_key} opening balance set to {opening_balance}")
        return self.get_cash_session(date_key)
