from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from repcell.common.dates import check_iso


class InvoiceItemCreate(BaseModel):
    product_id: Optional[UUID] = None
    description: str = Field(..., max_length=200)
    quantity: int = Field(1, ge=1)
    unit_price: Decimal = Field(Decimal("0"), ge=0)

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('La descripción del ítem es obligatoria')
        return cleaned


class InvoiceCreate(BaseModel):
    """Alta de factura. `date` fija la fecha de negocio (por defecto, ahora)."""
    client_name: Optional[str] = Field(None, max_length=200)
    items: List[InvoiceItemCreate] = Field(..., min_length=1)
    date: Optional[str] = Field(None, description="YYYY-MM-DD (medianoche local) o ISO-8601")
    notes: Optional[str] = None

    @field_validator('date')
    @classmethod
    def validate_date(cls, v: Optional[str]) -> Optional[str]:
        return check_iso(v)


class InvoiceItemOut(BaseModel):
    product_id: Optional[UUID] = None
    product_name: Optional[str] = None
    description: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class InvoiceOut(BaseModel):
    id: UUID
    client_name: Optional[str] = None
    notes: Optional[str] = None
    total: Decimal
    created_at: datetime
    items: List[InvoiceItemOut]


class InvoiceIncomeOut(BaseModel):
    date_from: datetime = Field(alias="from")
    date_to: datetime = Field(alias="to")
    total: Decimal
    count: int

    model_config = {"populate_by_name": True}
