"""Value types shared by the collection pipeline."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union


@dataclass(frozen=True)
class Location:
    """A named point to collect weather for. Coordinates are kept as strings."""

    name: str
    latitude: str
    longitude: str

    @classmethod
    def from_coordinates(
        cls,
        name: str,
        latitude: Union[str, float],
        longitude: Union[str, float],
    ) -> "Location":
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Location name cannot be empty.")
        return cls(name=name.strip(), latitude=str(latitude).strip(), longitude=str(longitude).strip())


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar window, ISO formatted (YYYY-MM-DD)."""

    start: str
    end: str

    @classmethod
    def from_dates(cls, start: dt.date, end: dt.date) -> "DateRange":
        if end < start:
            raise ValueError("Date range end must be on/after start")
        return cls(start=start.isoformat(), end=end.isoformat())

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start, "end": self.end}

    def matches(self, stored: Optional[Mapping[str, Any]]) -> bool:
        if not isinstance(stored, Mapping):
            return False
        return stored.get("start") == self.start and stored.get("end") == self.end


@dataclass
class WeatherRecord:
    """One successful fetch for a location, persisted as a single row."""

    location_name: str
    latitude: str
    longitude: str
    historical_data: Dict[str, Any]
    collected_at: dt.datetime
    date_range: DateRange
    station_id: str
    station_name: str

    def to_row(self) -> Dict[str, Any]:
        return {
            "location_name": self.location_name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "historical_data": self.historical_data,
            "collected_at": self.collected_at,
            "date_range": self.date_range.to_dict(),
            "station_id": self.station_id,
            "station_name": self.station_name,
        }

    @property
    def observation_count(self) -> int:
        results = self.historical_data.get("results") if isinstance(self.historical_data, Mapping) else None
        return len(results) if isinstance(results, list) else 0


@dataclass
class ProcessOutcome:
    """Result of processing one location. Never persisted."""

    success: bool
    location: Location
    skipped: bool = False
    data: Optional[WeatherRecord] = None
    error: Any = None

    @property
    def status(self) -> str:
        if not self.success:
            return "failed"
        return "skipped" if self.skipped else "succeeded"


@dataclass
class BatchSummary:
    """Aggregate view over the outcomes of one batch run."""

    outcomes: List[ProcessOutcome] = field(default_factory=list)
    date_range: Optional[DateRange] = None

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success and not outcome.skipped)

    @property
    def skipped(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.skipped)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.success)

    @property
    def failed_locations(self) -> List[str]:
        return [outcome.location.name for outcome in self.outcomes if not outcome.success]

    def counts(self) -> tuple:
        """Return (succeeded, skipped, failed)."""
        return self.succeeded, self.skipped, self.failed
