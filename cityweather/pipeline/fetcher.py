from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from ..clients.noaa_cdo import NoaaCdoClient, NoaaCdoError, RateLimitError
from ..core.dates import trailing_window, utc_now
from ..core.models import DateRange, Location, WeatherRecord


class HistoricalWeatherFetcher:
    """
    Fetch one location's daily summaries: find the closest station, then pull
    its readings for the window. Transient failures retry the whole sequence.
    """

    def __init__(
        self,
        client: NoaaCdoClient,
        *,
        retry_delay: float = 2.0,
        rate_limit_delay: float = 10.0,
        search_radius: int = 25,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.client = client
        self.retry_delay = max(0.0, retry_delay)
        self.rate_limit_delay = max(0.0, rate_limit_delay)
        self.search_radius = search_radius
        self._sleep = sleep
        self.logger = logger or logging.getLogger(__name__)

    def fetch(
        self,
        location: Location,
        max_retries: int = 1,
        date_range: Optional[DateRange] = None,
    ) -> Optional[WeatherRecord]:
        """
        Return a WeatherRecord, or None once the location is given up on.

        A location without a nearby station fails after a single attempt. Any
        other client error is retried until ``max_retries`` retries are spent,
        so a persistent failure costs ``max_retries + 1`` attempts.
        """
        window = date_range or trailing_window()
        attempts = 0

        while attempts <= max_retries:
            if attempts > 0:
                self.logger.info("Retry attempt %d for %s...", attempts, location.name)
            try:
                return self._attempt(location, window)
            except _StationNotFound:
                self.logger.error("No weather stations found near %s", location.name)
                return None
            except NoaaCdoError as exc:
                self.logger.error("Error fetching historical weather for %s: %s", location.name, exc)
                attempts += 1
                if attempts > max_retries:
                    self.logger.error(
                        "Failed to fetch data for %s after %d attempts.", location.name, max_retries + 1
                    )
                    return None

                if isinstance(exc, RateLimitError):
                    self.logger.warning("Rate limit hit, waiting %.0fs before retry...", self.rate_limit_delay)
                    delay = self.rate_limit_delay
                else:
                    delay = self.retry_delay
                self.logger.info(
                    "Will retry in %.0f seconds (attempt %d of %d)...", delay, attempts, max_retries
                )
                self._sleep(delay)
        return None

    def _attempt(self, location: Location, window: DateRange) -> WeatherRecord:
        self.logger.info("Fetching historical weather data for %s...", location.name)
        station = self.client.find_nearest_station(
            location.latitude, location.longitude, radius=self.search_radius
        )
        if not station:
            raise _StationNotFound(location.name)

        station_id = str(station.get("id", ""))
        station_name = str(station.get("name", ""))
        self.logger.info("Found station near %s: %s (%s)", location.name, station_name, station_id)

        payload = self.client.get_daily_data(station_id, window.start, window.end)
        return WeatherRecord(
            location_name=location.name,
            latitude=location.latitude,
            longitude=location.longitude,
            historical_data=payload,
            collected_at=utc_now(),
            date_range=window,
            station_id=station_id,
            station_name=station_name,
        )


class _StationNotFound(Exception):
    """No station within the search radius; not worth retrying."""
