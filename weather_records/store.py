"""
Store adapters.

The only code that talks to the database. Every SQLAlchemy failure is
rolled back and re-raised as StorageError so callers never see driver
exceptions. Lookups of identifiers that address nothing (including
strings that could never be an identifier) simply return None.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Mapping, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import StorageError
from .models import Alert, WeatherRecord, utcnow
from .queries import QuerySpec
from .schemas import AlertFields
from .validation import RecordChanges

logger = logging.getLogger(__name__)


class _Store:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def guarded(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Store call %s failed", action, exc_info=True)
            raise StorageError(f"{action} failed: {exc}") from exc


class RecordStore(_Store):
    """Weather record persistence."""

    def insert(self, changes: RecordChanges) -> WeatherRecord:
        record = WeatherRecord()
        changes.apply(record)
        with self.guarded("insert"):
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        return record

    def get_by_id(self, record_id: str) -> Optional[WeatherRecord]:
        with self.guarded("get"):
            return self.db.get(WeatherRecord, record_id)

    def query(self, spec: QuerySpec) -> List[WeatherRecord]:
        stmt = select(WeatherRecord).where(*spec.where).order_by(*spec.order_by)
        if spec.limit is not None:
            stmt = stmt.limit(spec.limit)
        with self.guarded("query"):
            return list(self.db.scalars(stmt).all())

    def _update(self, record_id: str, changes: RecordChanges, replace: bool) -> Optional[WeatherRecord]:
        with self.guarded("update"):
            record = self.db.get(WeatherRecord, record_id)
            if record is None:
                return None
            changes.apply(record, replace=replace)
            # Every update counts, even one that leaves the columns as they were
            record.updated_at = utcnow()
            self.db.commit()
            self.db.refresh(record)
            return record

    def update_full(self, record_id: str, changes: RecordChanges) -> Optional[WeatherRecord]:
        return self._update(record_id, changes, replace=True)

    def update_merge(self, record_id: str, changes: RecordChanges) -> Optional[WeatherRecord]:
        return self._update(record_id, changes, replace=False)

    def delete_by_id(self, record_id: str) -> Optional[WeatherRecord]:
        with self.guarded("delete"):
            record = self.db.get(WeatherRecord, record_id)
            if record is None:
                return None
            self.db.delete(record)
            self.db.commit()
            return record

    def aggregate(self, columns: Sequence[Any]) -> Optional[Mapping[str, Any]]:
        """Run one grouped aggregate over the whole collection."""
        with self.guarded("aggregate"):
            row = self.db.execute(select(*columns).select_from(WeatherRecord)).mappings().first()
        return dict(row) if row is not None else None


class AlertStore(_Store):
    """Alert persistence. Alerts are never updated."""

    def insert(self, fields: AlertFields) -> Alert:
        alert = Alert(**fields.model_dump())
        with self.guarded("insert"):
            self.db.add(alert)
            self.db.commit()
            self.db.refresh(alert)
        return alert

    def list_all(self) -> List[Alert]:
        stmt = select(Alert).order_by(Alert.created_at.desc())
        with self.guarded("query"):
            return list(self.db.scalars(stmt).all())

    def delete_by_id(self, alert_id: str) -> Optional[Alert]:
        with self.guarded("delete"):
            alert = self.db.get(Alert, alert_id)
            if alert is None:
                return None
            self.db.delete(alert)
            self.db.commit()
            return alert
