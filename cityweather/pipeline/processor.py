from __future__ import annotations

import logging
from threading import Lock
from typing import List, Optional, Protocol

from ..core.models import DateRange, Location, ProcessOutcome, WeatherRecord
from .checker import ExistingDataChecker
from .fetcher import HistoricalWeatherFetcher


class RecordWriter(Protocol):
    def insert(self, record: WeatherRecord) -> bool:
        ...


class DryRunWriter:
    """Keeps fetched records in memory instead of writing them to the store."""

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.records: List[WeatherRecord] = []
        self._lock = Lock()

    def insert(self, record: WeatherRecord) -> bool:
        with self._lock:
            self.records.append(record)
        self.logger.info(
            "[dry-run] would store %d observations for %s (%s to %s)",
            record.observation_count,
            record.location_name,
            record.date_range.start,
            record.date_range.end,
        )
        return True


class LocationProcessor:
    """
    Dedup check, fetch and store for a single location.

    ``process`` never raises: the scheduler aborts the whole batch on the
    first exception it sees, so every failure is folded into the outcome.
    """

    def __init__(
        self,
        fetcher: HistoricalWeatherFetcher,
        checker: ExistingDataChecker,
        writer: RecordWriter,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.fetcher = fetcher
        self.checker = checker
        self.writer = writer
        self.logger = logger or logging.getLogger(__name__)

    def process(
        self,
        location: Location,
        skip_existing: bool,
        max_retries: int,
        date_range: DateRange,
    ) -> ProcessOutcome:
        try:
            self.logger.info("Processing %s...", location.name)

            if skip_existing and self.checker.exists(location.name, date_range.start, date_range.end):
                self.logger.info(
                    "Weather data already exists for %s from %s to %s. Skipping.",
                    location.name,
                    date_range.start,
                    date_range.end,
                )
                return ProcessOutcome(success=True, location=location, skipped=True)

            record = self.fetcher.fetch(location, max_retries, date_range)
            if record is None:
                return ProcessOutcome(success=False, location=location, error="Failed to fetch data")

            self._store(record)
            return ProcessOutcome(success=True, location=location, data=record)
        except Exception as exc:  # pylint: disable=broad-except
            self.logger.exception("Error processing city %s: %s", location.name, exc)
            return ProcessOutcome(success=False, location=location, error=exc)

    def _store(self, record: WeatherRecord) -> None:
        # The fetch already succeeded; a failed write only gets logged.
        try:
            self.writer.insert(record)
        except Exception as exc:  # pylint: disable=broad-except
            self.logger.error("Error storing historical weather data for %s: %s", record.location_name, exc)
