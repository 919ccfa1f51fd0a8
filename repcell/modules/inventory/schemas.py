from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional
from uuid import UUID
from datetime import datetime

from repcell.modules.accounting.schemas import TransactionOut


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    quantity: int = Field(0, ge=0, description="Initial stock")
    price: Decimal = Field(..., ge=0, description="Sale price")
    supplier: Optional[str] = Field(None, max_length=100)
    barcode: Optional[str] = Field(None, max_length=50)
    category: Optional[str] = Field(None, max_length=100)
    min_stock: int = Field(3, ge=0)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('El nombre no puede estar vacío')
        return cleaned


class ProductOut(BaseModel):
    id: UUID
    name: str
    quantity: int
    price: Decimal
    supplier: Optional[str] = None
    barcode: Optional[str] = None
    category: Optional[str] = None
    min_stock: int
    is_low_stock: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}


class SaleCreate(BaseModel):
    """Venta directa de mostrador"""
    quantity: int = Field(..., ge=1, description="Units sold")
    unit_price: Decimal = Field(..., ge=0, description="Price per unit")
    notes: Optional[str] = Field(None, max_length=500)


class PurchaseCreate(BaseModel):
    """Compra de mercadería a proveedor"""
    quantity: int = Field(..., ge=1, description="Units purchased")
    unit_cost: Decimal = Field(..., ge=0, description="Cost per unit")
    supplier: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=500)


class StockMovementOut(BaseModel):
    """Producto actualizado y el asiento generado (None si el monto fue 0)"""
    product: ProductOut
    transaction: Optional[TransactionOut] = None
