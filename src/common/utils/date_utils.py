"""Utility functions for date manipulation."""

from datetime import date, datetime, time, timedelta

import pytz

from src.common.config.settings import settings


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(pytz.utc)


def shop_timezone():
    return pytz.timezone(settings.TIMEZONE)


def local_day(dt: datetime) -> date:
    """Calendar day of a timestamp in the shop's timezone. Naive values are treated as UTC."""
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt.astimezone(shop_timezone()).date()


def local_today() -> date:
    return local_day(utc_now())


def day_bounds_utc(day: date) -> tuple[datetime, datetime]:
    """Start (inclusive) and end (exclusive) of a local calendar day, expressed in UTC."""
    tz = shop_timezone()
    start = tz.localize(datetime.combine(day, time.min))
    end = tz.localize(datetime.combine(day + timedelta(days=1), time.min))
    return start.astimezone(pytz.utc), end.astimezone(pytz.utc)


def format_datetime_for_db(dt: datetime | None) -> str | None:
    """Formats a datetime as a UTC MySQL DATETIME string."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(pytz.utc)
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def parse_datetime_from_db(value: datetime | str | None) -> datetime | None:
    """MySQL DATETIME columns come back naive; they are stored in UTC."""
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value


def days_until(target: date, today: date) -> int:
    return (target - today).days
