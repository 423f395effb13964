"""
Pydantic schemas.

Inbound models coerce raw JSON into typed fields and silently drop keys
they do not know about. Outbound models define the JSON the API returns.
Both speak camelCase on the wire (recordedAt, windSpeed, ...).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import ALERT_LEVELS, DEFAULT_ALERT_LEVEL


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Offset-aware values are shifted to UTC; naive values are taken as UTC."""
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def as_aware_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


class InboundModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
        allow_inf_nan=False,
    )


class OutboundModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class WeatherRecordFields(InboundModel):
    """
    Every client-settable field of a weather record, all optional.

    Which of them the client actually sent is read from model_fields_set;
    whether recordedAt is mandatory depends on the operation and is
    checked by the validator, not here.
    """
    station: Optional[str] = None
    recorded_at: Optional[datetime] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    pressure: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("recorded_at")
    @classmethod
    def to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_naive_utc(value)


class AlertFields(InboundModel):
    """Payload for creating an alert."""
    title: Optional[str] = None
    message: Optional[str] = None
    level: Optional[str] = Field(None, validate_default=True)
    active: Optional[bool] = Field(None, validate_default=True)

    @field_validator("level")
    @classmethod
    def check_level(cls, value: Optional[str]) -> str:
        if value is None:
            return DEFAULT_ALERT_LEVEL
        if value not in ALERT_LEVELS:
            raise ValueError(f"level must be one of: {', '.join(ALERT_LEVELS)}")
        return value

    @field_validator("active")
    @classmethod
    def default_active(cls, value: Optional[bool]) -> bool:
        return True if value is None else value


class WeatherRecordOut(OutboundModel):
    """Record representation returned from the API."""
    id: str
    station: Optional[str] = None
    recorded_at: datetime
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    pressure: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("recorded_at", "created_at", "updated_at")
    @classmethod
    def mark_utc(cls, value: datetime) -> datetime:
        return as_aware_utc(value)


class AlertOut(OutboundModel):
    id: str
    title: Optional[str] = None
    message: Optional[str] = None
    level: str
    active: bool
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def mark_utc(cls, value: datetime) -> datetime:
        return as_aware_utc(value)


class StatsOut(OutboundModel):
    """
    Summary over the whole record collection.

    Averages and extrema are None when no record carries the field,
    which is different from a genuine 0.
    """
    count: int
    avg_temp: Optional[float] = None
    avg_humidity: Optional[float] = None
    min_temp: Optional[float] = None
    max_temp: Optional[float] = None


class MessageOut(BaseModel):
    message: str
    field: Optional[str] = None

