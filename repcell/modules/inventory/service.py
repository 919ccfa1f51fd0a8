from typing import List
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException, status
import logging

from repcell.modules.inventory.models import Product
from repcell.modules.inventory.schemas import ProductCreate
from repcell.common.exceptions import NotFoundError, InsufficientStockError

logger = logging.getLogger(__name__)


class InventoryService:
    """Service for product stock operations."""

    def __init__(self, db: Session):
        self.db = db

    def list_products(self) -> List[Product]:
        return self.db.query(Product).order_by(Product.created_at.desc()).all()

    def list_low_stock(self, limit: int = 20) -> List[Product]:
        return self.db.query(Product).filter(
            Product.quantity < Product.min_stock
        ).order_by(Product.quantity).limit(limit).all()

    def get_product(self, product_id: UUID) -> Product:
        product = self.db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Product not found")
        return product

    def get_product_for_update(self, product_id: UUID) -> Product:
        """Load a product holding a row lock where the backend supports it."""
        product = self.db.query(Product).filter(
            Product.id == product_id
        ).with_for_update().first()
        if not product:
            raise NotFoundError("Product not found")
        return product

    def create_product(self, product_data: ProductCreate) -> Product:
        product = Product(**product_data.model_dump())
        try:
            self.db.add(product)
            self.db.commit()
            self.db.refresh(product)
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Ya existe un producto con ese código de barras"
            )
        logger.info(f"Created product {product.id} ({product.name}) with stock {product.quantity}")
        return product

    def increase_stock(self, product: Product, quantity: int) -> int:
        """Add units to stock; the caller commits."""
        old_quantity = product.quantity
        product.quantity = old_quantity + quantity
        logger.info(f"Stock for product {product.id}: {old_quantity} -> {product.quantity}")
        return product.quantity

    def decrease_stock(self, product: Product, quantity: int) -> int:
        """Remove units from stock; the caller commits."""
        if product.quantity < quantity:
            raise InsufficientStockError(product.name, product.quantity, quantity)
        old_quantity = product.quantity
        product.quantity = old_quantity - quantity
        logger.info(f"Stock for product {product.id}: {old_quantity} -> {product.quantity}")
        return product.quantity

    def consume_stock(self, product: Product, quantity: int) -> int:
        """Decrease stock clamping at zero, as invoice creation does."""
        old_quantity = product.quantity
        product.quantity = max(0, old_quantity - quantity)
        logger.info(f"Stock for product {product.id}: {old_quantity} -> {product.quantity}")
        return product.quantity
