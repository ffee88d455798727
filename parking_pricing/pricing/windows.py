"""Calendar arithmetic for rate time windows.

A time window is stored as a time of day (plus optional end, duration limit and
weekday offsets). Pricing needs it as a concrete ``[start, end)`` interval on a
given calendar day, or, for weekly/biweekly rates, as a number of minutes.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from ..config import MINUTES_PER_DAY
from .types import TimeWindow, WindowType


def group_windows_by_type(windows: Iterable[TimeWindow]) -> Dict[WindowType, List[TimeWindow]]:
    """
    Buckets active windows by type, preserving store order inside each bucket.

    Windows whose label matched no known type are left out of every bucket; an
    empty bucket means "price with the rate's flat default".
    """
    buckets: Dict[WindowType, List[TimeWindow]] = {wt: [] for wt in WindowType}
    for w in windows:
        if not w.is_active or w.window_type is None:
            continue
        buckets[w.window_type].append(w)
    return buckets


def day_start(moment: datetime | date) -> datetime:
    d = moment.date() if isinstance(moment, datetime) else moment
    return datetime.combine(d, time(0, 0))


def iter_days(entry: datetime, exit: datetime) -> Iterable[datetime]:
    """Midnight of every calendar day from the entry day to the exit day, inclusive."""
    current = day_start(entry)
    last = day_start(exit)
    while current <= last:
        yield current
        current += timedelta(days=1)


def materialize_window(window: TimeWindow, day: datetime) -> Tuple[datetime, datetime]:
    start = day + window.start_time
    if window.end_time is not None:
        end = day + window.end_time
        if end <= start:
            # crosses midnight (e.g. 22:00 -> 06:00)
            end += timedelta(days=1)
    elif window.duration_limit_minutes:
        end = start + timedelta(minutes=window.duration_limit_minutes)
    else:
        end = start + timedelta(days=1)
    return start, end


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, floored; negative spans count as 0."""
    seconds = (end - start).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 60)


def minutes_overlap(entry: datetime, exit: datetime, start: datetime, end: datetime) -> int:
    lo = max(entry, start)
    hi = min(exit, end)
    if hi <= lo:
        return 0
    return minutes_between(lo, hi)


def _offset_minutes(day: Optional[int], at: Optional[timedelta]) -> int:
    minutes = int((at or timedelta(0)).total_seconds() // 60)
    return (day or 0) * MINUTES_PER_DAY + minutes


def compute_period_limit(window: Optional[TimeWindow], period_days: int) -> int:
    """
    Minutes of stay covered by a weekly/biweekly window.

    An explicit duration limit wins. Otherwise the span between
    (start_day, start_time) and (end_day, end_time) is used, wrapping forward by
    the period when the end precedes the start. A zero span means the whole period.
    """
    period_minutes = period_days * MINUTES_PER_DAY
    if window is None:
        return period_minutes
    if window.duration_limit_minutes:
        return window.duration_limit_minutes

    start = _offset_minutes(window.start_day, window.start_time)
    end_day = window.end_day if window.end_day is not None else window.start_day
    end = _offset_minutes(end_day, window.end_time)
    if end < start:
        end += period_minutes
    span = end - start
    return span if span > 0 else period_minutes


__all__ = [
    "group_windows_by_type",
    "day_start",
    "iter_days",
    "materialize_window",
    "minutes_between",
    "minutes_overlap",
    "compute_period_limit",
]
