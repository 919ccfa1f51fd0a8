"""
Arqueo diario (Daily Reconciliation)

Posición de caja de un día local: apertura, ingresos, egresos, neto y cierre.
Solo lectura e idempotente.
"""

from sqlalchemy.orm import Session
from sqlalchemy import func
from decimal import Decimal
from typing import Dict
import logging

from repcell.core.clock import Clock
from repcell.common import dates
from repcell.modules.accounting.models import Transaction, TransactionType
from repcell.modules.accounting.schemas import (
    DailySummaryOut, DayTotals, RangeSummaryOut, CashSessionOut
)
from repcell.modules.accounting.service import LedgerService

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class DailyReconciliationService:
    """Cálculo del arqueo de un día y resumen diario por rango"""

    def __init__(self, db: Session, clock: Clock):
        self.db = db
        self.clock = clock
        self.tz = clock.tz
        self.ledger = LedgerService(db, clock)

    def _totals_by_type(self, start, end) -> Dict[TransactionType, Decimal]:
        rows = self.db.query(
            Transaction.type,
            func.sum(Transaction.amount).label('total')
        ).filter(
            Transaction.date >= dates.to_storage(start),
            Transaction.date < dates.to_storage(end)
        ).group_by(Transaction.type).all()
        return {row.type: Decimal(row.total or 0) for row in rows}

    def daily_summary(self, day=None) -> DailySummaryOut:
        """
        Arqueo del día local que contiene `day` (hoy si se omite).

        closing_balance = opening_balance + income - expense
        """
        start, end = dates.day_bounds(day, self.tz, self.clock.now())

        totals = self._totals_by_type(start, end)
        income = totals.get(TransactionType.INCOME, ZERO)
        expense = totals.get(TransactionType.EXPENSE, ZERO)
        net = income - expense

        key = dates.date_key(start, self.tz)
        session = self.ledger.get_cash_session(key)
        opening_balance = Decimal(session.opening_balance) if session else ZERO

        transactions = self.ledger.list_window(start, end)

        return DailySummaryOut(
            date=start,
            date_key=key,
            income=income,
            expense=expense,
            net=net,
            opening_balance=opening_balance,
            closing_balance=opening_balance + net,
            transactions=[self.ledger.to_out(tx) for tx in transactions]
        )

    def range_summary(self, date_from=None, date_to=None) -> RangeSummaryOut:
        """Ingresos, egresos y neto por día local en [date_from, date_to]."""
        start = dates.normalize(date_from, self.tz) or dates.EPOCH.astimezone(self.tz)
        end = dates.normalize(date_to, self.tz) or self.clock.now()

        rows = self.db.query(
            Transaction.date, Transaction.type, Transaction.amount
        ).filter(
            Transaction.date >= dates.to_storage(start),
            Transaction.date <= dates.to_storage(end)
        ).yield_per(500)

        by_day: Dict[str, Dict[TransactionType, Decimal]] = {}
        for row in rows:
            key = dates.date_key(dates.from_storage(row.date, self.tz), self.tz)
            bucket = by_day.setdefault(key, {TransactionType.INCOME: ZERO, TransactionType.EXPENSE: ZERO})
            bucket[row.type] += Decimal(row.amount)

        days = [
            DayTotals(
                date=key,
                income=values[TransactionType.INCOME],
                expense=values[TransactionType.EXPENSE],
                net=values[TransactionType.INCOME] - values[TransactionType.EXPENSE]
            )
            for key, values in sorted(by_day.items())
        ]
        return RangeSummaryOut(date_from=start, date_to=end, days=days)

    def cash_position(self, day=None) -> CashSessionOut:
        """Saldo de apertura registrado para el día (0 si no existe)."""
        start, _ = dates.day_bounds(day, self.tz, self.clock.now())
        key = dates.date_key(start, self.tz)
        session = self.ledger.get_cash_session(key)
        return CashSessionOut(
            date=start,
            date_key=key,
            opening_balance=Decimal(session.opening_balance) if session else ZERO,
            notes=(session.notes or "") if session else ""
        )
