"""Tests for record and alert payload validation."""

from datetime import datetime

import pytest

from weather_records.errors import ClientInputError
from weather_records.models import WeatherRecord
from weather_records.validation import UNSET, RecordChanges, validate_alert, validate_record


def test_create_requires_recorded_at():
    with pytest.raises(ClientInputError) as excinfo:
        validate_record({"temperature": 20})

    assert excinfo.value.field == "recordedAt"


def test_create_rejects_unparseable_recorded_at():
    with pytest.raises(ClientInputError) as excinfo:
        validate_record({"recordedAt": "yesterday-ish"})

    assert excinfo.value.field == "recordedAt"


def test_numeric_field_must_be_a_number():
    with pytest.raises(ClientInputError) as excinfo:
        validate_record({"recordedAt": "2025-12-04T10:00:00Z", "humidity": "damp"})

    assert excinfo.value.field == "humidity"


def test_numeric_strings_are_coerced():
    changes = validate_record({"recordedAt": "2025-12-04T10:00:00Z", "pressure": "1013.2"})

    assert changes.pressure == pytest.approx(1013.2)


def test_no_range_check_on_measurements():
    changes = validate_record({"recordedAt": "2025-12-04T10:00:00Z", "temperature": -90, "humidity": 250})

    assert changes.temperature == -90
    assert changes.humidity == 250


def test_unknown_and_store_managed_fields_are_dropped():
    changes = validate_record({
        "recordedAt": "2025-12-04T10:00:00Z",
        "id": "abc",
        "createdAt": "2020-01-01T00:00:00Z",
        "colour": "blue",
    })

    assert changes.as_dict() == {"recorded_at": datetime(2025, 12, 4, 10, 0, 0)}


def test_offset_timestamps_are_converted_to_utc():
    changes = validate_record({"recordedAt": "2025-12-04T12:00:00+02:00"})

    assert changes.recorded_at == datetime(2025, 12, 4, 10, 0, 0)


def test_snake_case_names_are_accepted():
    changes = validate_record({"recorded_at": "2025-12-04T10:00:00", "wind_speed": 4})

    assert changes.wind_speed == 4


def test_absent_is_distinct_from_zero_and_null():
    changes = validate_record({"recordedAt": "2025-12-04T10:00:00", "temperature": 0, "humidity": None})

    assert changes.temperature == 0
    assert changes.humidity is None
    assert changes.pressure is UNSET


def test_update_allows_missing_recorded_at():
    changes = validate_record({"humidity": 70}, require_recorded_at=False)

    assert changes.as_dict() == {"humidity": 70}


def test_update_rejects_null_recorded_at():
    with pytest.raises(ClientInputError):
        validate_record({"recordedAt": None}, require_recorded_at=False)


def test_update_rejects_bad_recorded_at():
    with pytest.raises(ClientInputError):
        validate_record({"recordedAt": "not a time"}, require_recorded_at=False)


def test_payload_must_be_an_object():
    with pytest.raises(ClientInputError) as excinfo:
        validate_record(["recordedAt", "2025-12-04"])

    assert excinfo.value.field == "body"


def test_merge_keeps_omitted_fields():
    record = WeatherRecord(recorded_at=datetime(2025, 12, 4), temperature=25.5, humidity=60.0)

    RecordChanges(humidity=70.0).apply(record)

    assert record.temperature == 25.5
    assert record.humidity == 70.0


def test_replace_clears_omitted_fields_but_keeps_recorded_at():
    record = WeatherRecord(
        recorded_at=datetime(2025, 12, 4), station="A", temperature=25.5, humidity=60.0, notes="x"
    )

    RecordChanges(humidity=70.0).apply(record, replace=True)

    assert record.temperature is None
    assert record.station is None
    assert record.notes is None
    assert record.humidity == 70.0
    assert record.recorded_at == datetime(2025, 12, 4)


def test_alert_level_defaults_to_warning():
    assert validate_alert({"title": "Heat"}).level == "warning"
    assert validate_alert({"title": "Heat", "level": None}).level == "warning"


def test_alert_active_defaults_to_true():
    assert validate_alert({}).active is True
    assert validate_alert({"active": False}).active is False


def test_alert_invalid_level_is_rejected():
    with pytest.raises(ClientInputError) as excinfo:
        validate_alert({"title": "Heat", "level": "apocalyptic"})

    assert excinfo.value.field == "level"
