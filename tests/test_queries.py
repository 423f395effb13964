"""Tests for query composition."""

from datetime import date, datetime

import pytest

from weather_records import queries
from weather_records.errors import ClientInputError


@pytest.mark.parametrize("limit", [None, 0, -5])
def test_non_positive_limit_means_everything(limit):
    assert queries.list_all(limit).limit is None


def test_positive_limit_is_kept():
    assert queries.list_all(3).limit == 3


def test_list_all_orders_newest_first():
    spec = queries.list_all()

    assert len(spec.order_by) == 1
    assert "DESC" in str(spec.order_by[0])
    assert spec.where == ()


def test_latest_is_a_single_row():
    assert queries.latest().limit == 1


def test_day_bounds_are_half_open():
    start, end = queries.day_bounds(date(2025, 12, 4))

    assert start == datetime(2025, 12, 4, 0, 0, 0)
    assert end == datetime(2025, 12, 5, 0, 0, 0)


def test_day_bounds_cross_month_end():
    start, end = queries.day_bounds(date(2024, 2, 29))

    assert end == datetime(2024, 3, 1)


@pytest.mark.parametrize("value", ["2025-13-01", "04-12-2025", "2025-12-04T00:00", "tomorrow", "2025-02-30"])
def test_bad_dates_are_client_errors(value):
    with pytest.raises(ClientInputError) as excinfo:
        queries.by_date(value)

    assert excinfo.value.field == "date"


def test_by_date_sorts_ascending():
    spec = queries.by_date("2025-12-04")

    assert len(spec.where) == 2
    assert "ASC" in str(spec.order_by[0])
    assert spec.limit is None


def test_by_station_has_no_ordering():
    spec = queries.by_station("Kigali-1")

    assert len(spec.where) == 1
    assert spec.order_by == ()
