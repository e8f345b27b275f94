from datetime import datetime, timedelta, timezone

from app.shared.utils.datetime_utils import DateTimeUtils


def test_to_iso_z_converts_to_utc_without_microseconds():
    dt = datetime(2021, 3, 1, 7, 30, 15, 123456, tzinfo=timezone(timedelta(hours=-5)))
    assert DateTimeUtils.to_iso_z(dt) == "2021-03-01T12:30:15Z"


def test_naive_datetime_is_treated_as_utc():
    assert DateTimeUtils.to_iso_z(datetime(2021, 3, 1, 12, 0)) == "2021-03-01T12:00:00Z"


def test_from_iso_string_accepts_z_suffix():
    parsed = DateTimeUtils.from_iso_string("2021-03-01T12:00:00Z")
    assert parsed == datetime(2021, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_from_iso_string_invalid_returns_none():
    assert DateTimeUtils.from_iso_string("not a date") is None
    assert DateTimeUtils.from_iso_string(None) is None


def test_resolve_timezone():
    assert DateTimeUtils.resolve_timezone("") is None
    assert DateTimeUtils.resolve_timezone("Not/AZone") is None
