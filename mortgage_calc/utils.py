"""Utility functions for the mortgage calculator.

This module provides the calendar helpers used by the date-aware engine
(adding months, computing payment dates, month and window membership),
helpers for parsing user input into Python data types and a converter that
turns result dataclasses into JSON-ready structures.

All month arithmetic clamps the day of the month to the last valid day of
the target month, so ``add_months`` and ``payment_date_for`` always agree.
"""

from __future__ import annotations

import calendar
import dataclasses
from datetime import date, datetime
from typing import Any, Tuple


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def payment_date_for(start_date: date, month_offset: int, preferred_day: int) -> date:
    """Return the calendar date of the payment ``month_offset`` months after start.

    ``preferred_day`` is clamped to the last day of the target month, so a
    payment day of 31 falls on the 30th in April and on the 28th or 29th in
    February.
    """
    target = add_months(start_date, month_offset)
    last_day = calendar.monthrange(target.year, target.month)[1]
    return date(target.year, target.month, min(preferred_day, last_day))


def same_month(d1: date, d2: date) -> bool:
    """Return True when both dates fall in the same calendar month."""
    return (d1.year, d1.month) == (d2.year, d2.month)


def in_window(dt: date, start: date, end: date) -> bool:
    """Return True when ``dt`` lies between ``start`` and ``end`` inclusive."""
    return start <= dt <= end


def months_to_years_months(months: int) -> Tuple[int, int]:
    """Split a number of months into ``(years, months)``."""
    return months // 12, months % 12


def days_until(from_date: date, to_date: date) -> int:
    return (to_date - from_date).days


def parse_year_month(ym: str) -> date:
    """Parse a YYYY-MM string into a ``date`` object (first day of month).

    Parameters
    ----------
    ym: str
        A string in the form ``"YYYY-MM"``. The day component, if present,
        will be ignored.

    Returns
    -------
    date
        A date object representing the first day of the specified month.

    Raises
    ------
    ValueError
        If the string is not a valid year-month.
    """
    try:
        parts = ym.split("-")
        if len(parts) < 2:
            raise ValueError
        year = int(parts[0])
        month = int(parts[1])
        return date(year, month, 1)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid year-month string: {ym}") from exc


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string; ``YYYY-MM`` means the first of the month."""
    value = value.strip()
    if value.count("-") == 1:
        return parse_year_month(value)
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"Invalid date string: {value}") from exc


def float_from_str(value: str) -> float:
    """Convert a numeric string into a ``float``.

    The function strips any commas and surrounding whitespace. It raises
    ``ValueError`` if conversion fails.
    """
    try:
        cleaned = value.replace(",", "").strip()
        return float(cleaned)
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc


def to_jsonable(obj: Any) -> Any:
    """Recursively convert dataclasses, dates and containers for ``json.dump``."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {k: to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    return obj
