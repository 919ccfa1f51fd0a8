"""
Financial Reports Router

Period summary, top products and expenses by category, each available as
JSON and CSV. The summary also renders to PDF.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from repcell.dependencies.dbDependencies import db_dependency, clock_dependency
from repcell.modules.auth.dependencies import get_auth_context
from repcell.modules.auth.schemas import AuthContext
from repcell.common.params import date_param
from ..services.financial import FinancialReportService
from ..schemas import (
    SummaryResponse,
    TopProductsResponse,
    ExpensesByCategoryResponse
)
from ..utils import (
    create_csv_response,
    prepare_summary_csv,
    prepare_top_products_csv,
    prepare_expenses_csv,
    SUMMARY_CSV_HEADERS,
    TOP_PRODUCTS_CSV_HEADERS,
    EXPENSES_CSV_HEADERS
)
from ..utils.pdf import create_summary_pdf_response


router = APIRouter(prefix="/reports", tags=["Reports"])

FROM_DESCRIPTION = "Start of the period: YYYY-MM-DD (local midnight) or ISO-8601"
TO_DESCRIPTION = "End of the period (inclusive): YYYY-MM-DD or ISO-8601"
GRANULARITY_DESCRIPTION = "day, week or month (unknown values fall back to day)"


def _summary(db, clock, date_from, date_to, granularity) -> dict:
    service = FinancialReportService(db, clock)
    return service.get_summary(
        date_from=date_param(date_from, "from"),
        date_to=date_param(date_to, "to"),
        granularity=granularity
    )


def _top_products(db, clock, date_from, date_to, sort_by, limit) -> dict:
    service = FinancialReportService(db, clock)
    return service.get_top_products(
        date_from=date_param(date_from, "from"),
        date_to=date_param(date_to, "to"),
        sort_by=sort_by,
        limit=limit
    )


def _expenses(db, clock, date_from, date_to) -> dict:
    service = FinancialReportService(db, clock)
    return service.get_expenses_by_category(
        date_from=date_param(date_from, "from"),
        date_to=date_param(date_to, "to")
    )


@router.get("/summary", response_model=SummaryResponse)
def get_summary(
    db: db_dependency,
    clock: clock_dependency,
    date_from: Optional[str] = Query(None, alias="from", description=FROM_DESCRIPTION),
    date_to: Optional[str] = Query(None, alias="to", description=TO_DESCRIPTION),
    granularity: Optional[str] = Query(None, description=GRANULARITY_DESCRIPTION),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Income vs expenses per day, ISO week or month."""
    return SummaryResponse(**_summary(db, clock, date_from, date_to, granularity))


@router.get("/summary.csv", response_model=None)
def get_summary_csv(
    db: db_dependency,
    clock: clock_dependency,
    date_from: Optional[str] = Query(None, alias="from", description=FROM_DESCRIPTION),
    date_to: Optional[str] = Query(None, alias="to", description=TO_DESCRIPTION),
    granularity: Optional[str] = Query(None, description=GRANULARITY_DESCRIPTION),
    auth_context: AuthContext = Depends(get_auth_context)
) -> Response:
    report_data = _summary(db, clock, date_from, date_to, granularity)
    return create_csv_response(prepare_summary_csv(report_data), "summary.csv", SUMMARY_CSV_HEADERS)


@router.get("/summary.pdf", response_model=None)
def get_summary_pdf(
    db: db_dependency,
    clock: clock_dependency,
    date_from: Optional[str] = Query(None, alias="from", description=FROM_DESCRIPTION),
    date_to: Optional[str] = Query(None, alias="to", description=TO_DESCRIPTION),
    granularity: Optional[str] = Query(None, description=GRANULARITY_DESCRIPTION),
    auth_context: AuthContext = Depends(get_auth_context)
) -> Response:
    report_data = _summary(db, clock, date_from, date_to, granularity)
    return create_summary_pdf_response(report_data)


@router.get("/top-products", response_model=TopProductsResponse)
def get_top_products(
    db: db_dependency,
    clock: clock_dependency,
    date_from: Optional[str] = Query(None, alias="from", description=FROM_DESCRIPTION),
    date_to: Optional[str] = Query(None, alias="to", description=TO_DESCRIPTION),
    sort_by: Optional[str] = Query(None, description="quantity (default) or value"),
    limit: Optional[int] = Query(None, description="Clamped to 1-100, default 10"),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Best-selling products by units or by revenue."""
    return TopProductsResponse(**_top_products(db, clock, date_from, date_to, sort_by, limit))


@router.get("/top-products.csv", response_model=None)
def get_top_products_csv(
    db: db_dependency,
    clock: clock_dependency,
    date_from: Optional[str] = Query(None, alias="from", description=FROM_DESCRIPTION),
    date_to: Optional[str] = Query(None, alias="to", description=TO_DESCRIPTION),
    sort_by: Optional[str] = Query(None, description="quantity (default) or value"),
    limit: Optional[int] = Query(None, description="Clamped to 1-100, default 10"),
    auth_context: AuthContext = Depends(get_auth_context)
) -> Response:
    report_data = _top_products(db, clock, date_from, date_to, sort_by, limit)
    return create_csv_response(
        prepare_top_products_csv(report_data), "top-products.csv", TOP_PRODUCTS_CSV_HEADERS
    )


@router.get("/expenses-by-category", response_model=ExpensesByCategoryResponse)
def get_expenses_by_category(
    db: db_dependency,
    clock: clock_dependency,
    date_from: Optional[str] = Query(None, alias="from", description=FROM_DESCRIPTION),
    date_to: Optional[str] = Query(None, alias="to", description=TO_DESCRIPTION),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Expenses grouped by category, largest first."""
    return ExpensesByCategoryResponse(**_expenses(db, clock, date_from, date_to))


@router.get("/expenses-by-category.csv", response_model=None)
def get_expenses_by_category_csv(
    db: db_dependency,
    clock: clock_dependency,
    date_from: Optional[str] = Query(None, alias="from", description=FROM_DESCRIPTION),
    date_to: Optional[str] = Query(None, alias="to", description=TO_DESCRIPTION),
    auth_context: AuthContext = Depends(get_auth_context)
) -> Response:
    report_data = _expenses(db, clock, date_from, date_to)
    return create_csv_response(
        prepare_expenses_csv(report_data), "expenses-by-category.csv", EXPENSES_CSV_HEADERS
    )
