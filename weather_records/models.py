"""
ORM models.

We store two independent collections:
- weather observations, keyed by an opaque hex id
- alerts (operational notices), also keyed by an opaque hex id

No foreign keys between them.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base

ALERT_LEVELS = ("info", "warning", "critical")
DEFAULT_ALERT_LEVEL = "warning"


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite drops tzinfo anyway."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class WeatherRecord(Base):
    __tablename__ = "weather_records"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)

    station: Mapped[Optional[str]] = mapped_column(String, index=True)

    # When the observation was taken, not when it was stored
    recorded_at: Mapped[datetime] = mapped_column(DateTime, index=True)

    temperature: Mapped[Optional[float]] = mapped_column(Float)
    humidity: Mapped[Optional[float]] = mapped_column(Float)
    pressure: Mapped[Optional[float]] = mapped_column(Float)
    wind_speed: Mapped[Optional[float]] = mapped_column(Float)
    wind_direction: Mapped[Optional[str]] = mapped_column(Text)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


class Alert(Base):
    __tablename__ = "alerts"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    title: Mapped[Optional[str]] = mapped_column(Text)
    message: Mapped[Optional[str]] = mapped_column(Text)
    level: Mapped[str] = mapped_column(String(16), default=DEFAULT_ALERT_LEVEL)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
