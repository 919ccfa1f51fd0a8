"""
Helpers for query-string parameters shared by routers
"""
from typing import Optional
from fastapi import HTTPException, status

from repcell.common.dates import parse_iso


def date_param(value: Optional[str], name: str) -> Optional[str]:
    """Validate a YYYY-MM-DD or ISO-8601 query value; 422 when malformed."""
    if value is None or not value.strip():
        return None
    try:
        parse_iso(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{name} must be YYYY-MM-DD or an ISO-8601 timestamp"
        )
    return value.strip()
