from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Optional, Union

logger = logging.getLogger(__name__)

DateLike = Union[str, date, datetime]

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_date(d: Union[date, datetime]) -> date:
    return d.date() if isinstance(d, datetime) else d


def _monday_of(d: date) -> date:
    return d - timedelta(days=d.weekday())


def week_number(d: Union[date, datetime]) -> int:
    """
    Week of year with Monday as first day, where week 1 is the week holding Jan 1.

    Late-December days that share a week with the next Jan 1 are week 1.
    """
    day = _as_date(d)
    next_week_one = _monday_of(date(day.year + 1, 1, 1))
    if day >= next_week_one:
        return 1
    week_one = _monday_of(date(day.year, 1, 1))
    return (day - week_one).days // 7 + 1


def current_week(now: Optional[datetime] = None) -> int:
    return week_number(now or utcnow())


def current_year(now: Optional[datetime] = None) -> int:
    return (now or utcnow()).year


def format_iso_date(d: Optional[Union[date, datetime]] = None) -> str:
    return _as_date(d or utcnow()).strftime("%Y-%m-%d")


def try_parse_date(value: DateLike) -> Optional[datetime]:
    """
    Parse ISO-8601 or RFC 2822 into an aware UTC datetime; None if unparsable.
    Naive values are taken as UTC, date-only values as midnight UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            try:
                parsed = parsedate_to_datetime(text)
            except (TypeError, ValueError, IndexError):
                return None
            if parsed is None:
                return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_date(value: DateLike) -> datetime:
    parsed = try_parse_date(value)
    if parsed is None:
        logger.warning("Invalid date string: %s", value)
        return utcnow()
    return parsed


def to_iso_utc(d: datetime) -> str:
    """ISO-8601 with millisecond precision and a Z suffix."""
    d = d.astimezone(timezone.utc)
    return d.strftime("%Y-%m-%dT%H:%M:%S.") + f"{d.microsecond // 1000:03d}Z"


def is_within_last_days(value: DateLike, days: int = 7, now: Optional[datetime] = None) -> bool:
    compare = try_parse_date(value)
    if compare is None:
        return False
    threshold = (now or utcnow()) - timedelta(days=days)
    return compare > threshold


def format_display_date(value: DateLike) -> str:
    """e.g. "Nov 16, 2025"."""
    d = parse_date(value)
    return f"{_MONTHS[d.month - 1]} {d.day}, {d.year}"


def format_rfc2822(d: datetime) -> str:
    return format_datetime(d.astimezone(timezone.utc), usegmt=True)


def generate_branch_name(year: Optional[int] = None, week: Optional[int] = None) -> str:
    y = year or current_year()
    w = week or current_week()
    return f"news-{y}-w{w}"
