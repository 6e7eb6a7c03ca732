from datetime import datetime, timedelta, timezone

import pytest

from offline_stock.time_utils import parse_iso_datetime, to_utc_z, utcnow


def test_store_clock_is_naive_utc():
    now = utcnow()
    assert now.tzinfo is None
    assert abs(datetime.now(timezone.utc).replace(tzinfo=None) - now) < timedelta(seconds=5)


@pytest.mark.parametrize("raw, expected", [
    ("2026-03-01", datetime(2026, 3, 1)),
    ("2026-03-01T09:30", datetime(2026, 3, 1, 9, 30)),
    ("2026-03-01T09:30:00Z", datetime(2026, 3, 1, 9, 30)),
    ("2026-03-01T11:30:00+02:00", datetime(2026, 3, 1, 9, 30)),
    ("  ", None),
    (None, None),
])
def test_parse_iso_datetime(raw, expected):
    assert parse_iso_datetime(raw) == expected


def test_parse_iso_datetime_rejects_garbage():
    with pytest.raises(ValueError):
        parse_iso_datetime("next tuesday")


def test_to_utc_z_drops_microseconds_and_offsets():
    assert to_utc_z(None) is None
    assert to_utc_z(datetime(2026, 3, 1, 9, 30, 5, 123456)) == "2026-03-01T09:30:05Z"
    eastern = timezone(timedelta(hours=-5))
    assert to_utc_z(datetime(2026, 3, 1, 4, 30, tzinfo=eastern)) == "2026-03-01T09:30:00Z"
