"""
Reloj inyectable para la lógica de fechas.

Los servicios de contabilidad nunca llaman a datetime.now() directamente:
reciben un Clock que define "ahora" y la zona horaria del negocio. En
pruebas se reemplaza por un FixedClock.
"""
from datetime import datetime, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from repcell.core.config import settings


def resolve_timezone(name: Optional[str] = None) -> tzinfo:
    """Return the business timezone; an empty name means the server's local zone."""
    name = settings.TIMEZONE if name is None else name
    if name:
        return ZoneInfo(name)
    return datetime.now().astimezone().tzinfo


class Clock:
    """System clock bound to a business timezone."""

    def __init__(self, tz: Optional[tzinfo] = None):
        self.tz = tz or resolve_timezone()

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FixedClock(Clock):
    """Clock frozen at a given instant."""

    def __init__(self, instant: datetime, tz: Optional[tzinfo] = None):
        super().__init__(tz or instant.tzinfo)
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=self.tz)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant.astimezone(self.tz)


def get_clock() -> Clock:
    """FastAPI dependency; overridden in tests."""
    return Clock()
