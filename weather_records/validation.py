"""
Payload validation for weather records and alerts.

Raw JSON goes in; a typed structure comes out, or ClientInputError naming
the first offending field. Nothing here touches the store.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Dict, Iterator, Mapping, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .errors import ClientInputError
from .schemas import AlertFields, WeatherRecordFields

M = TypeVar("M", bound=BaseModel)


class _Unset:
    """Marker for a field the client did not send."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class RecordChanges:
    """
    The mutable fields of a weather record, each either a value
    (possibly None, meaning "clear it") or UNSET (not in the payload).
    """
    station: Union[str, None, _Unset] = UNSET
    recorded_at: Union[datetime, None, _Unset] = UNSET
    temperature: Union[float, None, _Unset] = UNSET
    humidity: Union[float, None, _Unset] = UNSET
    pressure: Union[float, None, _Unset] = UNSET
    wind_speed: Union[float, None, _Unset] = UNSET
    wind_direction: Union[str, None, _Unset] = UNSET
    notes: Union[str, None, _Unset] = UNSET

    def present(self) -> Iterator[Tuple[str, Any]]:
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not UNSET:
                yield f.name, value

    def as_dict(self) -> Dict[str, Any]:
        return dict(self.present())

    def apply(self, target: Any, replace: bool = False) -> None:
        """
        Write onto an ORM object.

        With replace=True every field missing from the payload is cleared,
        except recorded_at, which a stored record always keeps.
        """
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not UNSET:
                setattr(target, f.name, value)
            elif replace and f.name != "recorded_at":
                setattr(target, f.name, None)


def _field_name(model: Type[BaseModel], loc: Tuple[Any, ...]) -> str:
    if not loc:
        return "body"
    name = str(loc[0])
    info = model.model_fields.get(name)
    if info is not None and info.alias:
        return info.alias
    return name


def _parse(model: Type[M], payload: Any) -> M:
    if not isinstance(payload, Mapping):
        raise ClientInputError("Request body must be a JSON object", field="body")
    try:
        return model.model_validate(dict(payload))
    except ValidationError as exc:
        first = exc.errors()[0]
        field = _field_name(model, tuple(first.get("loc", ())))
        raise ClientInputError(f"{field}: {first['msg']}", field=field) from exc


def validate_record(payload: Any, require_recorded_at: bool = True) -> RecordChanges:
    """
    Validate a create or update payload.

    On create recordedAt must be present and a valid timestamp. On update it
    may be left out, but when it is sent it must still parse; sending null
    would strip the record of its timestamp and is rejected.
    """
    parsed = _parse(WeatherRecordFields, payload)
    sent = parsed.model_fields_set

    if parsed.recorded_at is None and (require_recorded_at or "recorded_at" in sent):
        raise ClientInputError("recordedAt is required", field="recordedAt")

    return RecordChanges(**{name: getattr(parsed, name) for name in sent})


def validate_alert(payload: Any) -> AlertFields:
    """Validate an alert payload; level and active fall back to their defaults."""
    return _parse(AlertFields, payload)
