"""
Report services
"""

from .base import BaseReportService
from .financial import FinancialReportService

__all__ = ["BaseReportService", "FinancialReportService"]
