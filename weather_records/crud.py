"""
CRUD functions.

Each function is one request's worth of work: validate the payload,
make the store call, and turn "nothing there" into NotFoundError.
Validation happens before the store is touched, so a bad payload
never reaches it. Nothing is retried; a StorageError from the store
propagates unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from . import queries
from .errors import NotFoundError
from .models import Alert, WeatherRecord
from .schemas import StatsOut
from .stats import compute_stats
from .store import AlertStore, RecordStore
from .validation import validate_alert, validate_record

logger = logging.getLogger(__name__)


def _found(record, message: str = "Not found"):
    """Raise NotFoundError for a missing document."""
    if record is None:
        raise NotFoundError(message)
    return record


# -------------------------
# Weather records
# -------------------------

def create_record(store: RecordStore, payload: Any) -> WeatherRecord:
    """Validate and insert; the store assigns the id."""
    changes = validate_record(payload, require_recorded_at=True)
    record = store.insert(changes)
    logger.info("Created weather record %s", record.id)
    return record


def get_record(store: RecordStore, record_id: str) -> WeatherRecord:
    """Fetch a single record by id."""
    return _found(store.get_by_id(record_id))


def list_records(store: RecordStore, limit: Optional[int] = None) -> List[WeatherRecord]:
    """All records, newest first. An empty list is a normal result."""
    return store.query(queries.list_all(limit))


def list_records_by_date(store: RecordStore, day: str) -> List[WeatherRecord]:
    """Records observed on one calendar day, oldest first."""
    return store.query(queries.by_date(day))


def list_records_by_station(store: RecordStore, station: str) -> List[WeatherRecord]:
    """Records from one station, exact match."""
    return store.query(queries.by_station(station))


def latest_record(store: RecordStore) -> WeatherRecord:
    """The record with the newest recordedAt."""
    found = store.query(queries.latest())
    return _found(found[0] if found else None, "No records")


def record_stats(store: RecordStore) -> StatsOut:
    """Count, averages and extrema over every record."""
    return compute_stats(store)


def replace_record(store: RecordStore, record_id: str, payload: Any) -> WeatherRecord:
    """
    Full replace: fields missing from the payload are cleared.
    recordedAt is optional here and kept when omitted.
    """
    changes = validate_record(payload, require_recorded_at=False)
    record = _found(store.update_full(record_id, changes))
    logger.info("Replaced weather record %s", record_id)
    return record


def patch_record(store: RecordStore, record_id: str, payload: Any) -> WeatherRecord:
    """Partial merge: only fields in the payload are written."""
    changes = validate_record(payload, require_recorded_at=False)
    record = _found(store.update_merge(record_id, changes))
    logger.info("Patched weather record %s (%s)", record_id, ", ".join(changes.as_dict()) or "no fields")
    return record


def delete_record(store: RecordStore, record_id: str) -> WeatherRecord:
    """DELETE record."""
    record = _found(store.delete_by_id(record_id))
    logger.info("Deleted weather record %s", record_id)
    return record


# -------------------------
# Alerts
# -------------------------

def create_alert(store: AlertStore, payload: Any) -> Alert:
    """Validate and insert an alert."""
    alert = store.insert(validate_alert(payload))
    logger.info("Created %s alert %s", alert.level, alert.id)
    return alert


def list_alerts(store: AlertStore) -> List[Alert]:
    """All alerts, newest first."""
    return store.list_all()


def delete_alert(store: AlertStore, alert_id: str) -> Alert:
    """DELETE alert."""
    alert = _found(store.delete_by_id(alert_id))
    logger.info("Deleted alert %s", alert_id)
    return alert
