"""Shared fixtures: an SQLite-backed repository and an in-memory CDO client."""

from __future__ import annotations

import sys
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cityweather.core.models import Location  # noqa: E402
from cityweather.storage.db import init_db  # noqa: E402
from cityweather.storage.repository import WeatherRepository  # noqa: E402


SAMPLE_PAYLOAD = {
    "metadata": {"resultset": {"offset": 1, "count": 2, "limit": 1000}},
    "results": [
        {"date": "2026-10-11T00:00:00", "datatype": "TMAX", "station": "GHCND:X", "attributes": ",,W,", "value": 61},
        {"date": "2026-10-11T00:00:00", "datatype": "PRCP", "station": "GHCND:X", "attributes": ",,W,", "value": 0.1},
    ],
}


class FakeCdoClient:
    """
    Stand-in for NoaaCdoClient keyed by latitude.

    stations: latitude -> station dict, or None for "no station nearby".
    station_failures: latitude -> exceptions raised by successive station
    lookups before one succeeds. data_failures: the same, keyed by station id.
    """

    def __init__(
        self,
        *,
        token_ok: bool = True,
        stations: Optional[Dict[str, Optional[dict]]] = None,
        station_failures: Optional[Dict[str, List[Exception]]] = None,
        data_failures: Optional[Dict[str, List[Exception]]] = None,
        payload: Optional[dict] = None,
    ) -> None:
        self.token_ok = token_ok
        self.stations = stations or {}
        self.station_failures = {k: list(v) for k, v in (station_failures or {}).items()}
        self.data_failures = {k: list(v) for k, v in (data_failures or {}).items()}
        self.payload = payload if payload is not None else SAMPLE_PAYLOAD
        self.calls: List[tuple] = []
        self._lock = Lock()

    def check_token(self) -> bool:
        with self._lock:
            self.calls.append(("datasets", None))
        return self.token_ok

    def find_nearest_station(self, latitude, longitude, *, radius=25):
        with self._lock:
            self.calls.append(("stations", latitude))
            pending = self.station_failures.get(latitude)
            if pending:
                raise pending.pop(0)
        if latitude in self.stations:
            return self.stations[latitude]
        return {"id": f"GHCND:US{latitude.replace('.', '').replace('-', '')}", "name": f"STATION {latitude}"}

    def get_daily_data(self, station_id, start_date, end_date, **_kwargs):
        with self._lock:
            self.calls.append(("data", station_id, start_date, end_date))
            pending = self.data_failures.get(station_id)
            if pending:
                raise pending.pop(0)
        return self.payload

    def calls_for(self, latitude: str) -> int:
        return sum(1 for call in self.calls if call[0] == "stations" and call[1] == latitude)

    def count(self, endpoint: str) -> int:
        return sum(1 for call in self.calls if call[0] == endpoint)

    def close(self) -> None:
        pass


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def fake_client_cls():
    return FakeCdoClient


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def session_factory(tmp_path):
    return init_db(f"sqlite:///{tmp_path / 'weather.db'}")


@pytest.fixture
def repository(session_factory):
    return WeatherRepository(session_factory)


def make_locations(count: int) -> List[Location]:
    return [Location.from_coordinates(f"City {i}, ST", f"{40 + i}.5", f"-{80 + i}.25") for i in range(count)]


@pytest.fixture
def locations_factory():
    return make_locations


@pytest.fixture
def seed_cities(repository):
    """Insert ``count`` active cities and return their Location values in id order."""

    def _seed(count: int) -> List[Location]:
        locations = make_locations(count)
        repository.add_cities(
            {
                "name": loc.name.split(",")[0],
                "state_code": "ST",
                "display_name": loc.name,
                "latitude": float(loc.latitude),
                "longitude": float(loc.longitude),
                "active": True,
            }
            for loc in locations
        )
        return locations

    return _seed
