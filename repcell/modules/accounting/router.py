from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from uuid import UUID
from datetime import date

from repcell.dependencies.dbDependencies import db_dependency, clock_dependency
from repcell.modules.auth.dependencies import get_auth_context, require_admin
from repcell.modules.auth.schemas import AuthContext
from repcell.common import dates
from repcell.common.params import date_param
from repcell.modules.accounting.service import LedgerService
from repcell.modules.accounting.daily import DailyReconciliationService
from repcell.modules.accounting.schemas import (
    TransactionCreate, TransactionOut, TransactionFilters, TransactionType,
    MessageOut, DailySummaryOut, RangeSummaryOut, CashSessionSet, CashSessionOut
)

router = APIRouter(prefix="/accounting", tags=["Accounting"])


@router.get("/transactions", response_model=List[TransactionOut])
def list_transactions(
    db: db_dependency,
    clock: clock_dependency,
    date_from: Optional[str] = Query(None, alias="from", description="YYYY-MM-DD or ISO-8601"),
    date_to: Optional[str] = Query(None, alias="to", description="YYYY-MM-DD or ISO-8601"),
    type: Optional[TransactionType] = Query(None),
    category: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """List ledger entries, newest first."""
    service = LedgerService(db, clock)
    filters = TransactionFilters(
        date_from=dates.normalize(date_param(date_from, "from"), clock.tz),
        date_to=dates.normalize(date_param(date_to, "to"), clock.tz),
        type=type,
        category=category,
        limit=limit
    )
    return [service.to_out(tx) for tx in service.list_transactions(filters)]


@router.post("/transactions", response_model=TransactionOut, status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction_data: TransactionCreate,
    db: db_dependency,
    clock: clock_dependency,
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Record a manual income or expense."""
    service = LedgerService(db, clock)
    transaction = service.create_transaction(service.entry_from_request(transaction_data))
    return service.to_out(transaction)


@router.delete("/transactions/{transaction_id}", response_model=MessageOut)
def delete_transaction(
    transaction_id: UUID,
    db: db_dependency,
    clock: clock_dependency,
    auth_context: AuthContext = Depends(require_admin)
):
    """Delete a ledger entry (admin only)."""
    LedgerService(db, clock).delete_transaction(transaction_id)
    return MessageOut(message="Deleted")


@router.get("/daily", response_model=DailySummaryOut)
def daily_summary(
    db: db_dependency,
    clock: clock_dependency,
    day: Optional[str] = Query(None, alias="date", description="YYYY-MM-DD (local day) or ISO-8601"),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Opening, income, expense, net and closing balance for one local day."""
    return DailyReconciliationService(db, clock).daily_summary(date_param(day, "date"))


@router.get("/range", response_model=RangeSummaryOut)
def range_summary(
    db: db_dependency,
    clock: clock_dependency,
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Per-day totals over a range."""
    return DailyReconciliationService(db, clock).range_summary(
        date_param(date_from, "from"), date_param(date_to, "to")
    )


@router.get("/cash-session", response_model=CashSessionOut)
def get_cash_session(
    db: db_dependency,
    clock: clock_dependency,
    day: Optional[str] = Query(None, alias="date"),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Opening balance recorded for a local day."""
    return DailyReconciliationService(db, clock).cash_position(date_param(day, "date"))


@router.post("/cash-session", response_model=CashSessionOut)
def set_cash_session(
    session_data: CashSessionSet,
    db: db_dependency,
    clock: clock_dependency,
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Create or overwrite the opening balance of a local day."""
    service = LedgerService(db, clock)
    key = session_data.date_key or dates.date_key(
        dates.normalize(session_data.date, clock.tz) or clock.now(), clock.tz
    )
    session = service.upsert_cash_session(key, session_data.opening_balance, session_data.notes)
    return CashSessionOut(
        date=dates.local_midnight(date.fromisoformat(key), clock.tz),
        date_key=session.date_key,
        opening_balance=session.opening_balance,
        notes=session.notes or ""
    )
