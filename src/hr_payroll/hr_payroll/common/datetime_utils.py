from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator, Sequence


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day in [start, end], both ends inclusive."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def working_days(start: date, end: date, weekly_off_days: Sequence[int]) -> list[date]:
    return [d for d in iter_days(start, end) if d.weekday() not in weekly_off_days]


def assessment_year_for(day: date) -> str:
    """Indian assessment year ("2025-26") of the financial year containing `day`.

    The financial year runs April to March and is assessed in the following year.
    """
    fy_start = day.year if day.month >= 4 else day.year - 1
    return f"{fy_start + 1}-{(fy_start + 2) % 100:02d}"
