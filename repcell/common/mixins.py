"""
Common mixins for models
"""
from sqlalchemy import Column, DateTime, Uuid
from uuid import uuid4

from repcell.common.dates import utcnow


class TimestampMixin:
    """Mixin for models that need timestamp tracking (naive UTC)"""

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class BaseMixin(TimestampMixin):
    """Primary key + timestamps for most business models"""

    id = Column(Uuid, primary_key=True, default=uuid4, index=True)
