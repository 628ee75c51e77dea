from datetime import date, datetime, timezone

import pytest

from src.exceptions import ValidationError
from src.utils.date_utils import (
    calendar_day_window,
    daily_window,
    parse_iso_date,
    recent_window,
    to_api_timestamp,
)


def local(year, month, day, hour=0, minute=0, second=0):
    return datetime(year, month, day, hour, minute, second)


def test_daily_window_spans_cutoff_to_cutoff():
    window = daily_window(local(2024, 1, 2, 18, 30))

    assert window.from_date == to_api_timestamp(local(2024, 1, 1, 13))
    assert window.to_date == to_api_timestamp(local(2024, 1, 2, 13))
    assert window.label == "2024-01-02"


def test_recent_window_is_24_hours():
    now = local(2024, 1, 2, 9)
    window = recent_window(now)

    assert window.from_date == to_api_timestamp(local(2024, 1, 1, 9))
    assert window.to_date == to_api_timestamp(now)


def test_calendar_day_window():
    window = calendar_day_window(date(2024, 1, 2))

    assert window.from_date == to_api_timestamp(local(2024, 1, 2))
    assert window.to_date == to_api_timestamp(local(2024, 1, 2, 23, 59, 59))


def test_api_timestamp_is_utc():
    assert to_api_timestamp(datetime(2024, 1, 2, 13, 0, tzinfo=timezone.utc)) == "2024-01-02T13:00:00Z"


def test_parse_iso_date():
    assert parse_iso_date("2024-01-02") == date(2024, 1, 2)

    with pytest.raises(ValidationError):
        parse_iso_date("2024/01/02")
