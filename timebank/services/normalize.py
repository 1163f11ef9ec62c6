import re
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, List, Tuple, Union

from timebank.constants import MAX_TAGS

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")

DateLike = Union[date, datetime, str]


def format_date_iso(value: Union[date, datetime]) -> str:
    """Format as YYYY-MM-DD (UTC for aware datetimes)"""
    return to_utc_date(value).isoformat()


def to_utc_date(value: DateLike) -> date:
    """
    Calendar date of ``value``.
    - "YYYY-MM-DD" strings are plain dates (UTC midnight), never shifted
    - aware datetimes are converted to UTC first; naive ones are taken as UTC
    """
    if isinstance(value, str):
        if not DATE_PATTERN.match(value):
            raise ValueError("Invalid date format (YYYY-MM-DD required)")
        return date.fromisoformat(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def week_start_for(value: DateLike) -> date:
    """Monday on or before the given date. Sunday belongs to the week that started six days earlier."""
    day = to_utc_date(value)
    return day - timedelta(days=day.weekday())


def normalize_tags(tags: Iterable[str]) -> List[str]:
    """Trim, lowercase, drop empties, dedupe in first-seen order, keep at most 10"""
    normalized = []
    seen = set()
    for tag in tags:
        cleaned = tag.strip().lower()
        if not cleaned or cleaned in seen:
            continue
        seen.add(cleaned)
        normalized.append(cleaned)
    return normalized[:MAX_TAGS]


def parse_month(value: str) -> date:
    """'YYYY-MM' → first day of that month"""
    if not MONTH_PATTERN.match(value):
        raise ValueError("Invalid month format (YYYY-MM required)")
    year, month = int(value[:4]), int(value[5:])
    if not (1 <= month <= 12):
        raise ValueError("Invalid month")
    return date(year, month, 1)


def current_month(now: datetime = None) -> date:
    now = now or datetime.now(timezone.utc)
    return date(now.year, now.month, 1)


def month_bounds(month_start: date) -> Tuple[date, date]:
    """[start, end) of the month containing month_start"""
    start = date(month_start.year, month_start.month, 1)
    if start.month == 12:
        end = date(start.year + 1, 1, 1)
    else:
        end = date(start.year, start.month + 1, 1)
    return start, end
