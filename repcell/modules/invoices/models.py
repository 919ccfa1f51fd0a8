from repcell.database.database import Base
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Text, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from repcell.common.mixins import BaseMixin, TimestampMixin


class Invoice(Base, BaseMixin):
    """
    Factura de venta.

    created_at es la fecha de negocio de la factura (puede venir en el
    request); los reportes de período la usan para agrupar.
    """
    __tablename__ = "invoices"

    client_name = Column(String(200), nullable=True)
    notes = Column(Text, nullable=True)
    total = Column(Numeric(15, 2), nullable=False, default=0)  # Σ quantity * unit_price

    # Relationships
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.position"
    )


class InvoiceItem(Base, TimestampMixin):
    __tablename__ = "invoice_items"

    id = Column(Uuid, primary_key=True, default=uuid4)
    invoice_id = Column(Uuid, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)
    position = Column(Integer, nullable=False, default=0)  # Orden dentro de la factura

    # Snapshot: la descripción se conserva aunque el producto cambie
    description = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(15, 2), nullable=False)

    # Relationships
    invoice = relationship("Invoice", back_populates="items")
    product = relationship("Product")

    @property
    def line_total(self):
        return self.quantity * self.unit_price
