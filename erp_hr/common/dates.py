"""Calendar-date helpers shared by the leave and attendance calculators.

All arithmetic is on whole calendar days: intervals are inclusive on both
ends, and stored values may be ``date`` objects, ISO date strings
("2024-03-01") or ISO timestamps ("2024-03-01T00:00:00.000Z").
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Iterator, Optional

logger = logging.getLogger(__name__)


def parse_calendar_date(value: Any) -> Optional[date]:
    """Coerce a stored date value to a ``date``.

    Returns None for empty or unparsable input; never raises.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def parse_interval(
    start: Any,
    end: Any,
    *,
    open_end_is_single_day: bool = False,
) -> Optional[tuple[date, date]]:
    """Parse an inclusive ``[start, end]`` interval.

    With ``open_end_is_single_day`` an empty ``end`` collapses the interval
    to ``start`` (holidays are often stored with only a from-date).
    Returns None if either bound is unusable.
    """
    start_d = parse_calendar_date(start)
    if open_end_is_single_day and (end is None or end == ""):
        end_d = start_d
    else:
        end_d = parse_calendar_date(end)
    if start_d is None or end_d is None:
        return None
    return start_d, end_d


def year_bounds(reference: date | datetime) -> tuple[date, date]:
    """First and last calendar day of the reference's year."""
    year = reference.year
    return date(year, 1, 1), date(year, 12, 31)


def overlap_days(
    start: date,
    end: date,
    window_start: date,
    window_end: date,
) -> int:
    """Inclusive count of days shared by ``[start, end]`` and the window."""
    overlap_start = max(start, window_start)
    overlap_end = min(end, window_end)
    if overlap_end < overlap_start:
        return 0
    return (overlap_end - overlap_start).days + 1


def each_day(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
