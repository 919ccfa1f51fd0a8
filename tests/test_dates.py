"""
Tests de normalización de fechas de negocio

Una fecha plana YYYY-MM-DD es la medianoche LOCAL del día; cualquier valor
con hora u offset se toma tal cual.
"""

from datetime import date, datetime, timezone

import pytest

from repcell.common import dates
from tests.conftest import BUSINESS_TZ, NOW


class TestNormalize:

    def test_plain_date_is_local_midnight(self):
        value = dates.normalize("2025-03-15", BUSINESS_TZ)
        assert value == datetime(2025, 3, 15, 0, 0, tzinfo=BUSINESS_TZ)
        # Buenos Aires es UTC-3: la medianoche local son las 03:00 UTC
        assert dates.to_storage(value) == datetime(2025, 3, 15, 3, 0)

    def test_explicit_utc_is_kept(self):
        value = dates.normalize("2025-03-15T02:00:00Z", BUSINESS_TZ)
        assert value == datetime(2025, 3, 15, 2, 0, tzinfo=timezone.utc)
        assert dates.date_key(value, BUSINESS_TZ) == "2025-03-14"

    def test_naive_time_is_local(self):
        value = dates.normalize("2025-03-15T10:30:00", BUSINESS_TZ)
        assert value == datetime(2025, 3, 15, 10, 30, tzinfo=BUSINESS_TZ)

    def test_date_object(self):
        assert dates.normalize(date(2025, 1, 2), BUSINESS_TZ) == dates.local_midnight(date(2025, 1, 2), BUSINESS_TZ)

    def test_empty_values(self):
        assert dates.normalize(None, BUSINESS_TZ) is None
        assert dates.normalize("", BUSINESS_TZ) is None

    def test_malformed_raises(self):
        with pytest.raises(ValueError):
            dates.parse_iso("15/03/2025")


class TestDateKey:

    def test_plain_date_and_its_midnight_share_key(self):
        plain = dates.normalize("2025-03-15", BUSINESS_TZ)
        explicit = dates.normalize("2025-03-15T00:00:00-03:00", BUSINESS_TZ)
        assert dates.date_key(plain, BUSINESS_TZ) == dates.date_key(explicit, BUSINESS_TZ) == "2025-03-15"

    def test_late_evening_stays_on_local_day(self):
        late = dates.normalize("2025-03-15T23:30:00-03:00", BUSINESS_TZ)
        assert dates.date_key(late, BUSINESS_TZ) == "2025-03-15"


class TestDayBounds:

    def test_defaults_to_today(self):
        start, end = dates.day_bounds(None, BUSINESS_TZ, NOW)
        assert start == datetime(2025, 3, 15, tzinfo=BUSINESS_TZ)
        assert end == datetime(2025, 3, 16, tzinfo=BUSINESS_TZ)

    def test_instant_inside_day(self):
        start, end = dates.day_bounds("2025-03-10T18:45:00-03:00", BUSINESS_TZ, NOW)
        assert start == datetime(2025, 3, 10, tzinfo=BUSINESS_TZ)
        assert end == datetime(2025, 3, 11, tzinfo=BUSINESS_TZ)


class TestStorageRoundTrip:

    def test_from_storage_is_aware_local(self):
        stored = datetime(2025, 3, 15, 3, 0)
        assert dates.from_storage(stored, BUSINESS_TZ) == datetime(2025, 3, 15, 0, 0, tzinfo=BUSINESS_TZ)


class TestCheckIso:

    def test_blank_becomes_none(self):
        assert dates.check_iso("   ") is None

    def test_valid_is_stripped(self):
        assert dates.check_iso(" 2025-03-15 ") == "2025-03-15"

    def test_invalid_raises(self):
        with pytest.raises(ValueError):
            dates.check_iso("not-a-date")
