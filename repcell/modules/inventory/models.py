from repcell.database.database import Base
from sqlalchemy import Column, Integer, String, Numeric
from repcell.common.mixins import BaseMixin


class Product(Base, BaseMixin):
    __tablename__ = "products"

    name = Column(String(100), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)  # Stock disponible
    price = Column(Numeric(15, 2), nullable=False, default=0)  # Precio de venta
    supplier = Column(String(100), nullable=True)
    barcode = Column(String(50), nullable=True, unique=True)  # Código de barras
    category = Column(String(100), nullable=True, index=True)
    min_stock = Column(Integer, nullable=False, default=3)  # Umbral de alerta

    @property
    def is_low_stock(self) -> bool:
        return self.quantity < self.min_stock
