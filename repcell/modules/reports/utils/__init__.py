"""
Utilities for Reports module

CSV export and value formatting shared by the report routers.
PDF rendering lives in `repcell.modules.reports.utils.pdf`.
"""

import csv
import io
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List

from fastapi import Response


SUMMARY_CSV_HEADERS = {
    "bucket": "bucket",
    "income": "income",
    "expense": "expense",
    "net": "net",
}

TOP_PRODUCTS_CSV_HEADERS = {
    "name": "name",
    "quantity": "quantity",
    "value": "value",
}

EXPENSES_CSV_HEADERS = {
    "category": "category",
    "total": "total",
}


def create_csv_response(
    data: List[Dict[str, Any]],
    filename: str,
    headers: Dict[str, str] = None
) -> Response:
    """
    Create a CSV response from a list of dictionaries.

    Args:
        data: List of dictionaries with report data
        filename: Name for the CSV file
        headers: Optional mapping of field names to CSV headers

    Returns:
        FastAPI Response with CSV content
    """
    fieldnames = list(headers.keys()) if headers else (list(data[0].keys()) if data else [])
    csv_headers = list(headers.values()) if headers else fieldnames

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=fieldnames, extrasaction="ignore")
    writer.writerow(dict(zip(fieldnames, csv_headers)))
    for row in data:
        writer.writerow({key: format_csv_value(row.get(key)) for key in fieldnames})

    csv_content = output.getvalue()
    output.close()

    return Response(
        content=csv_content,
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={filename}",
            "Content-Type": "text/csv; charset=utf-8"
        }
    )


def format_csv_value(value: Any) -> str:
    """
    Format a value for CSV export.

    None becomes an empty cell, Decimal keeps its exact digits and dates are
    written in ISO-8601.
    """
    if value is None:
        return ""
    elif isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, (date, datetime)):
        return value.isoformat()
    elif isinstance(value, bool):
        return "Yes" if value else "No"
    else:
        return str(value)


def prepare_summary_csv(report_data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Prepare period summary rows for CSV export"""
    return [
        {
            "bucket": row["bucket"],
            "income": row["income"],
            "expense": row["expense"],
            "net": row["net"]
        }
        for row in report_data["rows"]
    ]


def prepare_top_products_csv(report_data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Prepare top products rows for CSV export"""
    return [
        {
            "name": row["name"],
            "quantity": row["quantity"],
            "value": row["value"]
        }
        for row in report_data["rows"]
    ]


def prepare_expenses_csv(report_data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Prepare expenses by category rows for CSV export"""
    return [
        {"category": row["category"], "total": row["total"]}
        for row in report_data["rows"]
    ]


def format_money(value: Any) -> str:
    """Two-decimal rendering used by the PDF reports."""
    return f"{Decimal(value or 0):.2f}"
