"""Month-granularity date handling for experience timelines."""

import re
from datetime import date

DEFAULT_TENURE_MONTHS = 12

_MONTH_MAP = {
    "jan": 1, "january": 1, "feb": 2, "february": 2, "mar": 3, "march": 3,
    "apr": 4, "april": 4, "may": 5, "jun": 6, "june": 6,
    "jul": 7, "july": 7, "aug": 8, "august": 8, "sep": 9, "sept": 9,
    "september": 9, "oct": 10, "october": 10, "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

_ONGOING = {"present", "current", "now"}

_ISO_RE = re.compile(r"^(\d{4})(?:-(\d{1,2})(?:-\d{1,2})?)?$")
_SLASH_RE = re.compile(r"^(\d{1,2})/(\d{4})$")
_NAMED_RE = re.compile(r"^([a-z]+)\.?,?\s+(\d{4})$")


def is_ongoing(value: str | None) -> bool:
    return bool(value) and value.strip().lower() in _ONGOING


def parse_month(value: str | None, today: date | None = None) -> tuple[int, int] | None:
    """Parse a date string into (year, month).

    Returns None when the value cannot be resolved. Bare years resolve to
    January; "Present"/"Current" resolve to `today`.
    """
    if not value:
        return None
    text = value.strip().lower()
    if not text:
        return None
    if text in _ONGOING:
        today = today or date.today()
        return today.year, today.month

    match = _ISO_RE.match(text)
    if match:
        year = int(match.group(1))
        month = int(match.group(2)) if match.group(2) else 1
        return _valid(year, month)

    match = _SLASH_RE.match(text)
    if match:
        return _valid(int(match.group(2)), int(match.group(1)))

    match = _NAMED_RE.match(text)
    if match and match.group(1) in _MONTH_MAP:
        return _valid(int(match.group(2)), _MONTH_MAP[match.group(1)])

    return None


def _valid(year: int, month: int) -> tuple[int, int] | None:
    if 1900 <= year <= 2100 and 1 <= month <= 12:
        return year, month
    return None


def months_between(start: tuple[int, int], end: tuple[int, int]) -> int:
    """Whole calendar months from start to end, never negative."""
    months = (end[0] - start[0]) * 12 + (end[1] - start[1])
    return max(0, months)


def resolve_end(
    end_date: str | None, is_current: bool, today: date | None = None
) -> tuple[int, int] | None:
    """Resolve the effective end month of a role (today for current roles)."""
    today = today or date.today()
    if is_current or is_ongoing(end_date):
        return today.year, today.month
    return parse_month(end_date, today)


def resolve_tenure_months(
    start_date: str | None,
    end_date: str | None,
    is_current: bool,
    today: date | None = None,
) -> int | None:
    """Tenure in months (at least 1), or None when the start is unresolvable.

    A missing or unparseable end date runs to `today`.
    """
    start = parse_month(start_date, today)
    if start is None:
        return None
    end = resolve_end(end_date, is_current, today)
    if end is None:
        today = today or date.today()
        end = today.year, today.month
    return max(1, months_between(start, end))
