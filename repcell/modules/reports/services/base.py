"""
Base service class for Reports module

Provides common functionality for all report services: database session,
business timezone, range defaults and calendar bucketing.
"""

from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from repcell.core.clock import Clock
from repcell.common import dates

GRANULARITIES = ("day", "week", "month")


class BaseReportService:
    """Base service class for all report services"""

    def __init__(self, db: Session, clock: Clock):
        self.db = db
        self.clock = clock
        self.tz = clock.tz

    def _parse_range(self, date_from=None, date_to=None) -> Tuple[datetime, datetime]:
        """Inclusive [from, to] range; defaults are the epoch and now."""
        start = dates.normalize(date_from, self.tz) or dates.EPOCH.astimezone(self.tz)
        end = dates.normalize(date_to, self.tz) or self.clock.now()
        return start, end

    def _apply_date_filter(self, query, date_field, start: datetime, end: datetime):
        """Apply an inclusive date range filter on a naive-UTC column"""
        return query.filter(
            date_field >= dates.to_storage(start),
            date_field <= dates.to_storage(end)
        )

    @staticmethod
    def _normalize_granularity(granularity: Optional[str]) -> str:
        return granularity if granularity in GRANULARITIES else "day"

    def _bucket_key(self, stored: datetime, granularity: str) -> str:
        """
        Calendar bucket of a stored instant, on the local date.

        day   -> YYYY-MM-DD
        week  -> <ISO week-year>-W<ISO week>, week not zero-padded
        month -> YYYY-MM
        """
        local_day = dates.from_storage(stored, self.tz).date()
        if granularity == "month":
            return f"{local_day.year:04d}-{local_day.month:02d}"
        if granularity == "week":
            iso_year, iso_week, _ = local_day.isocalendar()
            return f"{iso_year}-W{iso_week}"
        return local_day.isoformat()

    @staticmethod
    def _bucket_order(key: str, granularity: str) -> Tuple:
        """Chronological sort key for a bucket label (week numbers are not padded)."""
        if granularity == "week":
            iso_year, iso_week = key.split("-W")
            return int(iso_year), int(iso_week)
        return (key,)
