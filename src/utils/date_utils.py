from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from ..exceptions import ValidationError

DAILY_CUTOFF_HOUR = 13


@dataclass(frozen=True)
class NewsWindow:
    from_date: str
    to_date: str
    label: str = field(default="", compare=False)


def to_api_timestamp(value: datetime) -> str:
    # Naive datetimes are treated as local time
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def today_iso(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).date().isoformat()


def recent_window(now: Optional[datetime] = None, hours: int = 24) -> NewsWindow:
    now = now or datetime.now()
    return NewsWindow(
        from_date=to_api_timestamp(now - timedelta(hours=hours)),
        to_date=to_api_timestamp(now),
        label="recent",
    )


def daily_window(now: Optional[datetime] = None) -> NewsWindow:
    """13:00 yesterday to 13:00 today, local time."""
    now = now or datetime.now()
    cutoff = datetime.combine(now.date(), time(DAILY_CUTOFF_HOUR))
    return NewsWindow(
        from_date=to_api_timestamp(cutoff - timedelta(days=1)),
        to_date=to_api_timestamp(cutoff),
        label=now.date().isoformat(),
    )


def calendar_day_window(day: date) -> NewsWindow:
    start = datetime.combine(day, time.min)
    end = datetime.combine(day, time(23, 59, 59))
    return NewsWindow(
        from_date=to_api_timestamp(start),
        to_date=to_api_timestamp(end),
        label=day.isoformat(),
    )
