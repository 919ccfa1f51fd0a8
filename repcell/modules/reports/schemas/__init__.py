"""
Pydantic schemas for Reports module

Response models for the report endpoints. The range bounds are exposed as
`from` / `to`.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class Granularity(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class TopProductsSort(str, Enum):
    QUANTITY = "quantity"
    VALUE = "value"


class ReportRange(BaseModel):
    """Resolved report period"""
    date_from: datetime = Field(alias="from", description="Start of the period (inclusive)")
    date_to: datetime = Field(alias="to", description="End of the period (inclusive)")

    model_config = {"populate_by_name": True}


# Summary Schemas
class PeriodRow(BaseModel):
    bucket: str = Field(description="YYYY-MM-DD, YYYY-Www or YYYY-MM")
    income: Decimal = Field(description="Invoice totals plus manual income")
    expense: Decimal
    net: Decimal


class SummaryResponse(ReportRange):
    """Response for the period summary report"""
    granularity: Granularity
    rows: List[PeriodRow]


# Top Products Schemas
class TopProductItem(BaseModel):
    product_id: Optional[UUID] = None
    name: str
    quantity: int
    value: Decimal


class TopProductsResponse(ReportRange):
    """Response for the top products report"""
    sort_by: TopProductsSort
    rows: List[TopProductItem]


# Expenses Schemas
class ExpenseCategoryItem(BaseModel):
    category: str
    total: Decimal


class ExpensesByCategoryResponse(ReportRange):
    """Response for the expenses by category report"""
    total: Decimal
    rows: List[ExpenseCategoryItem]
