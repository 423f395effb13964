"""
Query composition.

Turns the three listing modes the API offers (everything, one calendar
day, one station) into a QuerySpec the store can run: filter clauses,
ordering and an optional row limit.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Optional, Tuple

from .errors import ClientInputError
from .models import WeatherRecord

DAY_FORMAT = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class QuerySpec:
    where: Tuple[Any, ...] = ()
    order_by: Tuple[Any, ...] = ()
    limit: Optional[int] = None


def effective_limit(limit: Optional[int]) -> Optional[int]:
    """Only a positive integer caps the result; anything else means all rows."""
    if limit is None or isinstance(limit, bool) or limit <= 0:
        return None
    return limit


def list_all(limit: Optional[int] = None) -> QuerySpec:
    """Newest observation first."""
    return QuerySpec(
        order_by=(WeatherRecord.recorded_at.desc(),),
        limit=effective_limit(limit),
    )


def latest() -> QuerySpec:
    return list_all(limit=1)


def parse_day(value: str) -> date:
    if not isinstance(value, str) or not DAY_FORMAT.match(value):
        raise ClientInputError(f"Invalid date {value!r}, expected YYYY-MM-DD", field="date")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ClientInputError(f"Invalid date {value!r}: {exc}", field="date") from exc


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Half-open [midnight, next midnight) in UTC."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def by_date(value: str) -> QuerySpec:
    """Records observed on one calendar day, oldest first."""
    start, end = day_bounds(parse_day(value))
    return QuerySpec(
        where=(WeatherRecord.recorded_at >= start, WeatherRecord.recorded_at < end),
        order_by=(WeatherRecord.recorded_at.asc(),),
    )


def by_station(station: str) -> QuerySpec:
    """
    Exact, case-sensitive match on the station label.

    No ordering is requested: rows come back in the store's natural
    order, which for SQLite is insertion order but is not guaranteed
    for other backends.
    """
    return QuerySpec(where=(WeatherRecord.station == station,))
