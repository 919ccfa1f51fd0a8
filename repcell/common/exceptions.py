"""
Errores de dominio.

Son subclases de HTTPException para que los servicios puedan lanzarlos
directamente y FastAPI los traduzca al código HTTP correspondiente.
"""
from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for errors surfaced to the caller."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(status_code=self.status_code, detail=message)
        self.message = message


class ValidationError(DomainError):
    """Malformed or out-of-range input."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(DomainError):
    """Unknown transaction, product or invoice."""

    status_code = status.HTTP_404_NOT_FOUND


class InsufficientStockError(DomainError):
    """Sale exceeds available stock."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, product_name: str, available: int, requested: int):
        super().__init__(
            f"Stock insuficiente para {product_name}. "
            f"Disponible: {available}, Solicitado: {requested}"
        )
        self.available = available
        self.requested = requested


class UpstreamWriteFailure(Exception):
    """A best-effort ledger write failed. Logged by the recorder, never surfaced."""

    def __init__(self, invoice_id, cause: Exception):
        super().__init__(f"Ledger mirroring failed for invoice {invoice_id}: {cause}")
        self.invoice_id = invoice_id
        self.cause = cause
