"""Batch orchestration: validate, load locations, fan out, tally."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from functools import partial
from typing import List, Optional, Protocol

from tqdm.auto import tqdm

from ..clients.noaa_cdo import NoaaCdoClient
from ..core.concurrency import run_bounded
from ..core.config import AppConfig
from ..core.dates import date_span_days, trailing_window
from ..core.models import BatchSummary, Location
from ..storage.db import init_db
from ..storage.locations import ConfigLocationSource
from ..storage.repository import WeatherRepository
from .checker import ExistingDataChecker
from .fetcher import HistoricalWeatherFetcher
from .processor import DryRunWriter, LocationProcessor, RecordWriter


class BatchAbortedError(RuntimeError):
    """Raised when a precondition fails before any location is processed."""


class LocationSource(Protocol):
    def get_active_locations(self) -> List[Location]:
        ...


@dataclass
class BatchOptions:
    limit: int = 0
    skip_existing: bool = True
    max_retries: int = 1
    concurrency: int = 3
    show_progress: bool = False
    dry_run: bool = False


class BatchRunner:
    """
    Runs one collection batch over the active locations.

    The token probe and the location load are fatal preconditions; after that
    every location ends up succeeded, skipped or failed and the run itself
    completes.
    """

    def __init__(
        self,
        client: NoaaCdoClient,
        repository: WeatherRepository,
        *,
        location_source: Optional[LocationSource] = None,
        fetcher: Optional[HistoricalWeatherFetcher] = None,
        writer: Optional[RecordWriter] = None,
        logger: Optional[logging.Logger] = None,
        today: Optional[dt.date] = None,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.client = client
        self.repository = repository
        self.location_source = location_source or repository
        self.fetcher = fetcher or HistoricalWeatherFetcher(client, logger=self.logger)
        self.writer = writer or repository
        self.checker = ExistingDataChecker(repository, logger=self.logger)
        self.today = today

    def run(self, options: Optional[BatchOptions] = None) -> BatchSummary:
        options = options or BatchOptions()
        concurrency = options.concurrency
        if concurrency < 1:
            self.logger.warning("Concurrency %d is not valid; using 1", concurrency)
            concurrency = 1
        max_retries = max(0, options.max_retries)

        self.logger.info("Starting batch weather data fetching...")
        self.logger.info("Concurrency level: %d", concurrency)

        if not self.client.check_token():
            raise BatchAbortedError("Aborting fetching due to invalid API token")

        locations = self._load_locations()
        if not locations:
            raise BatchAbortedError("No active cities found in the database. Aborting.")
        self.logger.info("Found %d active cities.", len(locations))

        if 0 < options.limit < len(locations):
            locations = locations[: options.limit]
        self.logger.info("Will process %d cities.", len(locations))

        # One window for the whole batch, however long the run takes.
        window = trailing_window(self.today)
        self.logger.info(
            "Collecting %s to %s (%d days)", window.start, window.end, date_span_days(window)
        )

        processor = LocationProcessor(self.fetcher, self.checker, self.writer, logger=self.logger)
        worker = partial(
            _process_location,
            processor,
            skip_existing=options.skip_existing,
            max_retries=max_retries,
            date_range=window,
        )

        with tqdm(
            total=len(locations),
            desc="Locations",
            unit="city",
            disable=not options.show_progress,
        ) as progress:
            outcomes = run_bounded(
                locations,
                worker,
                concurrency,
                on_complete=lambda _index, _outcome: progress.update(1),
            )

        summary = BatchSummary(outcomes=outcomes, date_range=window)
        self._report(summary)
        return summary

    def _load_locations(self) -> List[Location]:
        try:
            return list(self.location_source.get_active_locations())
        except Exception as exc:  # pylint: disable=broad-except
            self.logger.error("Error fetching cities: %s", exc)
            return []

    def _report(self, summary: BatchSummary) -> None:
        self.logger.info("Weather data fetching completed:")
        self.logger.info("- Successfully processed: %d cities", summary.succeeded)
        self.logger.info("- Skipped (already exists): %d cities", summary.skipped)
        self.logger.info("- Failed to process: %d cities", summary.failed)
        if summary.failed:
            self.logger.info("Failed cities:")
            for name in summary.failed_locations:
                self.logger.info("- %s", name)


def _process_location(processor: LocationProcessor, location: Location, *, skip_existing, max_retries, date_range):
    return processor.process(location, skip_existing, max_retries, date_range)


def run_batch(
    config: AppConfig,
    options: Optional[BatchOptions] = None,
    *,
    source: str = "database",
    logger: Optional[logging.Logger] = None,
    today: Optional[dt.date] = None,
) -> BatchSummary:
    """
    Build the collaborators from ``config`` and run one batch.

    Raises:
        ConfigError: required configuration values are missing.
        BatchAbortedError: the token probe failed or there is nothing to process.
    """
    config.validate()
    options = options or BatchOptions()
    logger = logger or logging.getLogger(__name__)

    client = NoaaCdoClient(config.token, base_url=config.base_url, timeout=config.timeout)
    try:
        repository = WeatherRepository(init_db(config.database_url), logger=logger)
        if source == "config":
            location_source: LocationSource = ConfigLocationSource(config.locations)
        elif source == "database":
            location_source = repository
        else:
            raise ValueError(f"Unknown location source: {source}")

        fetcher = HistoricalWeatherFetcher(
            client,
            retry_delay=config.retry_delay,
            rate_limit_delay=config.rate_limit_delay,
            search_radius=config.search_radius,
            logger=logger,
        )
        writer: RecordWriter = DryRunWriter(logger=logger) if options.dry_run else repository
        runner = BatchRunner(
            client,
            repository,
            location_source=location_source,
            fetcher=fetcher,
            writer=writer,
            logger=logger,
            today=today,
        )
        return runner.run(options)
    finally:
        client.close()
