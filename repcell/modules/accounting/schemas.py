"""
Esquemas Pydantic para el módulo de contabilidad

Un esquema de entrada por endpoint, con las restricciones de cada campo.
Las fechas llegan como texto (YYYY-MM-DD o ISO-8601 completo) y el servicio
las normaliza con la zona horaria del negocio.
"""

from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import datetime
from enum import Enum

from repcell.common.dates import parse_iso, check_iso, PLAIN_DATE_RE


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


# ===== TRANSACTION SCHEMAS =====

class TransactionCreate(BaseModel):
    """Alta manual de un movimiento de caja"""
    date: Optional[str] = Field(None, description="YYYY-MM-DD (medianoche local) o ISO-8601")
    type: TransactionType
    amount: Decimal = Field(..., description="Monto, debe ser mayor a 0")  # > 0 se valida en el servicio (400)
    description: str = Field(..., max_length=1000)
    category: Optional[str] = Field(None, max_length=100)

    @field_validator('date')
    @classmethod
    def validate_date(cls, v: Optional[str]) -> Optional[str]:
        return check_iso(v)

    @field_validator('category')
    @classmethod
    def clean_category(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None


class LedgerEntry(BaseModel):
    """Movimiento interno generado por ventas, compras o facturas"""
    date: Optional[datetime] = None
    type: TransactionType
    amount: Decimal
    description: str
    category: Optional[str] = None
    product_id: Optional[UUID] = None
    quantity: Optional[int] = None
    invoice_id: Optional[UUID] = None
    supplier: Optional[str] = None


class TransactionOut(BaseModel):
    id: UUID
    date: datetime
    type: TransactionType
    amount: Decimal
    description: str
    category: Optional[str] = None
    product_id: Optional[UUID] = None
    product_name: Optional[str] = None
    quantity: Optional[int] = None
    invoice_id: Optional[UUID] = None
    supplier: Optional[str] = None
    created_at: datetime


class TransactionFilters(BaseModel):
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    type: Optional[TransactionType] = None
    category: Optional[str] = None
    limit: Optional[int] = Field(None, ge=1)


class MessageOut(BaseModel):
    message: str


# ===== SUMMARY SCHEMAS =====

class DailySummaryOut(BaseModel):
    date: datetime
    date_key: str
    income: Decimal
    expense: Decimal
    net: Decimal
    opening_balance: Decimal
    closing_balance: Decimal
    transactions: List[TransactionOut]


class DayTotals(BaseModel):
    date: str
    income: Decimal
    expense: Decimal
    net: Decimal


class RangeSummaryOut(BaseModel):
    date_from: datetime = Field(alias="from")
    date_to: datetime = Field(alias="to")
    days: List[DayTotals]

    model_config = {"populate_by_name": True}


# ===== CASH SESSION SCHEMAS =====

class CashSessionSet(BaseModel):
    """Fija el saldo de apertura de un día (crea o sobrescribe)"""
    date: Optional[str] = Field(None, description="YYYY-MM-DD o ISO-8601")
    date_key: Optional[str] = Field(None, description="YYYY-MM-DD; tiene prioridad sobre date")
    opening_balance: Decimal = Field(..., description="Saldo inicial, no negativo")
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator('date')
    @classmethod
    def validate_date(cls, v: Optional[str]) -> Optional[str]:
        return check_iso(v)

    @field_validator('date_key')
    @classmethod
    def validate_date_key(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not PLAIN_DATE_RE.match(v):
            raise ValueError('date_key debe tener formato YYYY-MM-DD')
        parse_iso(v)
        return v


class CashSessionOut(BaseModel):
    date: Optional[datetime] = None
    date_key: str
    opening_balance: Decimal
    notes: str = ""
