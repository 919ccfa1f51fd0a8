"""
Normalización de fechas de negocio.

Una fecha "plana" (YYYY-MM-DD, sin hora ni zona) se interpreta como la
medianoche LOCAL de ese día en la zona horaria del negocio, nunca como
medianoche UTC. Cualquier valor con hora u offset explícito se toma tal cual;
si trae hora pero no offset se asume hora local.

En base de datos las fechas se guardan como UTC sin tzinfo.
"""
import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Tuple, Union

PLAIN_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateInput = Union[str, date, datetime, None]


def is_plain_date(value: str) -> bool:
    return bool(PLAIN_DATE_RE.match(value.strip()))


def parse_iso(value: str) -> Union[date, datetime]:
    """Parse an ISO-8601 string into a date (plain) or datetime. Raises ValueError."""
    text = value.strip()
    if is_plain_date(text):
        return date.fromisoformat(text)
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def local_midnight(day: date, tz: tzinfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def normalize(value: DateInput, tz: tzinfo) -> Optional[datetime]:
    """Return an aware datetime in the business timezone, or None."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = parse_iso(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=tz)
        return value.astimezone(tz)
    return local_midnight(value, tz)


def date_key(value: datetime, tz: tzinfo) -> str:
    """Local calendar day (YYYY-MM-DD) of an instant."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz)
    return value.astimezone(tz).date().isoformat()


def day_bounds(value: DateInput, tz: tzinfo, now: datetime) -> Tuple[datetime, datetime]:
    """Local-day window [start, next start) containing value (today when empty)."""
    moment = normalize(value, tz) or now.astimezone(tz)
    day = moment.astimezone(tz).date()
    return local_midnight(day, tz), local_midnight(day + timedelta(days=1), tz)


def to_storage(value: datetime) -> datetime:
    """Aware datetime -> naive UTC for persistence."""
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_storage(value: datetime, tz: tzinfo) -> datetime:
    """Naive UTC from the database -> aware datetime in the business timezone."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def check_iso(value: Optional[str]) -> Optional[str]:
    """Pydantic field validator body: blank -> None, malformed -> ValueError."""
    if value is None:
        return value
    value = value.strip()
    if not value:
        return None
    try:
        parse_iso(value)
    except ValueError:
        raise ValueError('La fecha debe ser YYYY-MM-DD o ISO-8601')
    return value
