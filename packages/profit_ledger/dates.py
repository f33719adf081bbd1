"""Calendar helpers shared by the normalizer, aggregator and queries.

Ledger keys are ISO dates (``YYYY-MM-DD``) and months are addressed as
``YYYY-MM``. Comparisons always go through :class:`datetime.date` so that
inputs in different spellings (``2025-6-1`` vs ``2025-06-01``) never compare
lexically.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime

_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")

type DateLike = date | str


def parse_date(value: DateLike) -> date:
    """Return ``value`` as a :class:`date`.

    Accepts ``date`` (and ``datetime``, truncated) or a string whose first
    token is ``YYYY-MM-DD``; a trailing ``THH:MM:SS`` part is ignored.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"invalid date: {value!r}")
    s = value.strip()
    first = s.split()[0] if s else s
    first = first.split("T", 1)[0]
    try:
        return datetime.strptime(first, "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValueError(f"invalid date (expected YYYY-MM-DD): {value!r}") from exc


def try_parse_date(value: object) -> date | None:
    try:
        return parse_date(value)  # type: ignore[arg-type]
    except ValueError:
        return None


def iso(value: DateLike) -> str:
    return parse_date(value).isoformat()


def parse_year_month(value: str) -> tuple[int, int]:
    """Parse ``YYYY-MM`` into ``(year, month)``."""

    m = _YEAR_MONTH_RE.match(value.strip()) if isinstance(value, str) else None
    if m is None:
        raise ValueError(f"invalid month (expected YYYY-MM): {value!r}")
    year, month = int(m.group(1)), int(m.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"invalid month (expected YYYY-MM): {value!r}")
    return year, month


def month_bounds(year_month: str) -> tuple[date, date]:
    """Return the first and last calendar day of ``year_month``."""

    year, month = parse_year_month(year_month)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def in_month(d: date, year_month: str) -> bool:
    year, month = parse_year_month(year_month)
    return d.year == year and d.month == month


def current_year_month(today: date | None = None) -> str:
    t = today or date.today()
    return f"{t.year:04d}-{t.month:02d}"


__all__ = [
    "DateLike",
    "current_year_month",
    "in_month",
    "iso",
    "month_bounds",
    "parse_date",
    "parse_year_month",
    "try_parse_date",
]
