"""Test configuration and fixtures."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from weather_records.db import StoreConnection
from weather_records.main import create_app
from weather_records.models import WeatherRecord
from weather_records.settings import Settings

# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite://"

API = "/api/v1"


@pytest.fixture(scope="function")
def connection():
    """A fresh in-memory store per test."""
    conn = StoreConnection(TEST_DATABASE_URL)
    yield conn
    conn.dispose()


@pytest.fixture(scope="function")
def test_db(connection):
    db = connection.session()
    yield db
    db.close()


@pytest.fixture(scope="function")
def client(connection):
    """Create a test client over the in-memory store."""
    settings = Settings(database_url=TEST_DATABASE_URL)
    app = create_app(settings=settings, connection=connection)

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_records(test_db):
    """Observations across two days and two stations."""
    records = [
        WeatherRecord(
            station="Kigali-1",
            recorded_at=datetime(2025, 12, 3, 23, 59, 59),
            temperature=18.0,
            humidity=80.0,
        ),
        WeatherRecord(
            station="Kigali-1",
            recorded_at=datetime(2025, 12, 4, 0, 0, 0),
            temperature=19.5,
            humidity=75.0,
            pressure=1012.0,
        ),
        WeatherRecord(
            station="kigali-1",
            recorded_at=datetime(2025, 12, 4, 12, 30, 0),
            temperature=25.5,
            humidity=60.0,
            wind_speed=3.2,
            wind_direction="NE",
        ),
        WeatherRecord(
            station="Musanze",
            recorded_at=datetime(2025, 12, 4, 18, 0, 0),
            notes="sensor offline, no readings",
        ),
        WeatherRecord(
            station="Musanze",
            recorded_at=datetime(2025, 12, 5, 0, 0, 0),
            temperature=14.0,
        ),
    ]

    for record in records:
        test_db.add(record)

    test_db.commit()

    return records
