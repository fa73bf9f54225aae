import datetime as dt
import logging

import pytest
from sqlalchemy.exc import OperationalError

from cityweather.core.models import DateRange, WeatherRecord
from cityweather.pipeline.checker import ExistingDataChecker


def _record(name="Durham, NC", start="2026-10-11", end="2026-10-17"):
    return WeatherRecord(
        location_name=name,
        latitude="35.994",
        longitude="-78.8986",
        historical_data={"results": []},
        collected_at=dt.datetime(2026, 10, 18, 6, 0, tzinfo=dt.timezone.utc),
        date_range=DateRange(start=start, end=end),
        station_id="GHCND:USW00013722",
        station_name="RALEIGH DURHAM INTERNATIONAL AIRPORT",
    )


@pytest.fixture
def checker(repository):
    return ExistingDataChecker(repository)


def test_exists_after_insert(repository, checker):
    assert checker.exists("Durham, NC", "2026-10-11", "2026-10-17") is False
    assert repository.insert(_record()) is True
    assert checker.exists("Durham, NC", "2026-10-11", "2026-10-17") is True


def test_exact_window_and_location_required(repository, checker):
    repository.insert(_record())

    assert checker.exists("Durham, NC", "2026-10-12", "2026-10-18") is False
    assert checker.exists("Durham, NC", "2026-10-11", "2026-10-16") is False
    assert checker.exists("Chicago, IL", "2026-10-11", "2026-10-17") is False


def test_fallback_scan_when_primary_query_fails(repository, checker, monkeypatch):
    repository.insert(_record())
    repository.insert(_record(start="2026-10-04", end="2026-10-10"))

    def broken(*_args, **_kwargs):
        raise OperationalError("SELECT ...", {}, Exception("no such function: JSON_EXTRACT"))

    monkeypatch.setattr(repository, "count_for_range", broken)

    assert checker.exists("Durham, NC", "2026-10-04", "2026-10-10") is True
    assert checker.exists("Durham, NC", "2026-09-27", "2026-10-03") is False


def test_fails_open_when_store_unreachable(repository, checker, monkeypatch, caplog):
    def broken(*_args, **_kwargs):
        raise RuntimeError("connection refused")

    monkeypatch.setattr(repository, "count_for_range", broken)
    monkeypatch.setattr(repository, "date_ranges_for", broken)

    with caplog.at_level(logging.ERROR):
        assert checker.exists("Durham, NC", "2026-10-11", "2026-10-17") is False
    assert "connection refused" in caplog.text
