from fastapi import APIRouter, Depends, Query, status
from typing import List
from uuid import UUID

from repcell.dependencies.dbDependencies import db_dependency, clock_dependency
from repcell.modules.auth.dependencies import get_auth_context, require_admin
from repcell.modules.auth.schemas import AuthContext
from repcell.modules.inventory.service import InventoryService
from repcell.modules.inventory.schemas import (
    ProductCreate, ProductOut, SaleCreate, PurchaseCreate, StockMovementOut
)
from repcell.modules.accounting.recorder import SalesRecorder
from repcell.modules.accounting.service import LedgerService

router = APIRouter(prefix="/inventory", tags=["Inventory"])


@router.get("/", response_model=List[ProductOut])
def list_products(
    db: db_dependency,
    auth_context: AuthContext = Depends(get_auth_context)
):
    """List all products, newest first."""
    return InventoryService(db).list_products()


@router.post("/", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    product_data: ProductCreate,
    db: db_dependency,
    auth_context: AuthContext = Depends(require_admin)
):
    """Create a product (admin only)."""
    return InventoryService(db).create_product(product_data)


@router.get("/low-stock", response_model=List[ProductOut])
def list_low_stock(
    db: db_dependency,
    limit: int = Query(20, ge=1, le=100),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Products below their minimum stock, lowest first."""
    return InventoryService(db).list_low_stock(limit)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: UUID,
    db: db_dependency,
    auth_context: AuthContext = Depends(get_auth_context)
):
    return InventoryService(db).get_product(product_id)


@router.post("/{product_id}/sell", response_model=StockMovementOut)
def sell_product(
    product_id: UUID,
    sale_data: SaleCreate,
    db: db_dependency,
    clock: clock_dependency,
    auth_context: AuthContext = Depends(get_auth_context)
):
    """
    Direct counter sale.

    Decrements stock and records the income in one step. Fails with 409 and
    changes nothing when stock is insufficient.
    """
    recorder = SalesRecorder(db, clock)
    transaction = recorder.record_sale(
        product_id, sale_data.quantity, sale_data.unit_price, sale_data.notes
    )
    product = InventoryService(db).get_product(product_id)
    return StockMovementOut(
        product=ProductOut.model_validate(product),
        transaction=LedgerService(db, clock).to_out(transaction) if transaction else None
    )


@router.post("/{product_id}/purchase", response_model=StockMovementOut)
def purchase_product(
    product_id: UUID,
    purchase_data: PurchaseCreate,
    db: db_dependency,
    clock: clock_dependency,
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Supplier purchase: increments stock and records the expense."""
    recorder = SalesRecorder(db, clock)
    transaction = recorder.record_purchase(
        product_id,
        purchase_data.quantity,
        purchase_data.unit_cost,
        purchase_data.supplier,
        purchase_data.notes
    )
    product = InventoryService(db).get_product(product_id)
    return StockMovementOut(
        product=ProductOut.model_validate(product),
        transaction=LedgerService(db, clock).to_out(transaction) if transaction else None
    )
