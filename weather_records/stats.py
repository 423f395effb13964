"""
Summary statistics over the whole record collection.

The heavy lifting is a single grouped aggregate run by the store. SQL
AVG/MIN/MAX skip NULLs, so a record without a temperature counts towards
`count` but not towards the temperature figures.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from sqlalchemy import func

from .models import WeatherRecord
from .schemas import StatsOut

STAT_COLUMNS = (
    func.count(WeatherRecord.id).label("count"),
    func.avg(WeatherRecord.temperature).label("avg_temp"),
    func.avg(WeatherRecord.humidity).label("avg_humidity"),
    func.min(WeatherRecord.temperature).label("min_temp"),
    func.max(WeatherRecord.temperature).label("max_temp"),
)


def _number(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def summarize(row: Optional[Mapping[str, Any]]) -> StatsOut:
    """Shape an aggregate row; an empty collection yields count 0 and no values."""
    if not row or not row.get("count"):
        return StatsOut(count=0)
    return StatsOut(
        count=int(row["count"]),
        avg_temp=_number(row.get("avg_temp")),
        avg_humidity=_number(row.get("avg_humidity")),
        min_temp=_number(row.get("min_temp")),
        max_temp=_number(row.get("max_temp")),
    )


def compute_stats(store) -> StatsOut:
    return summarize(store.aggregate(STAT_COLUMNS))
