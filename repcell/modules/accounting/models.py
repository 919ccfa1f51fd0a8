"""
Modelos SQLAlchemy para el módulo de contabilidad

- Transaction: movimiento atómico de ingreso o egreso (libro de caja)
- CashSession: saldo de apertura de un día calendario local

El cierre del día no se guarda: se calcula como apertura + ingresos - egresos.
"""

from repcell.database.database import Base
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Numeric, Enum, Text, Uuid
from sqlalchemy.orm import relationship
from repcell.common.mixins import BaseMixin, TimestampMixin
import enum


class TransactionType(enum.Enum):
    INCOME = "income"    # Ingreso
    EXPENSE = "expense"  # Egreso


class Transaction(Base, BaseMixin):
    """
    Movimiento del libro de caja.

    Inmutable una vez creado; solo se elimina (borrado físico).
    invoice_id marca los ingresos generados desde una factura: los reportes
    por período los excluyen porque el total de la factura ya los cuenta.
    """
    __tablename__ = "transactions"

    date = Column(DateTime, nullable=False, index=True)  # Fecha de negocio, UTC sin tzinfo
    type = Column(Enum(TransactionType), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=True, index=True)

    # Enlaces opcionales
    product_id = Column(Uuid, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)
    quantity = Column(Integer, nullable=True)
    # Sin FK: el vínculo sobrevive al borrado de la factura y sigue excluyendo el ingreso
    invoice_id = Column(Uuid, nullable=True, index=True)
    supplier = Column(String(100), nullable=True)

    product = relationship("Product")


class CashSession(Base, TimestampMixin):
    """Saldo de apertura por día local. Una fila por date_key."""
    __tablename__ = "cash_sessions"

    date_key = Column(String(10), primary_key=True)  # YYYY-MM-DD
    opening_balance = Column(Numeric(15, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)
