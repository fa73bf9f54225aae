from __future__ import annotations

import datetime as dt
from typing import Optional

from .models import DateRange

WINDOW_START_OFFSET_DAYS = 7
WINDOW_END_OFFSET_DAYS = 1


def trailing_window(today: Optional[dt.date] = None) -> DateRange:
    """
    Return the collection window: seven days ago through yesterday, inclusive.

    Uses the local calendar date, the convention the CDO API expects for
    ``startdate``/``enddate``.
    """
    today = today or dt.date.today()
    start = today - dt.timedelta(days=WINDOW_START_OFFSET_DAYS)
    end = today - dt.timedelta(days=WINDOW_END_OFFSET_DAYS)
    return DateRange.from_dates(start, end)


def date_span_days(window: DateRange) -> int:
    """Return the number of calendar days covered by the inclusive window."""
    start = dt.date.fromisoformat(window.start)
    end = dt.date.fromisoformat(window.end)
    return (end - start).days + 1


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).replace(microsecond=0)
