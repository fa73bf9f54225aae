from __future__ import annotations

import logging
from typing import Optional

from ..core.models import DateRange
from ..storage.repository import WeatherRepository


class ExistingDataChecker:
    """Answers whether a location/window was already collected. Fails open."""

    def __init__(self, repository: WeatherRepository, *, logger: Optional[logging.Logger] = None) -> None:
        self.repository = repository
        self.logger = logger or logging.getLogger(__name__)

    def exists(self, location_name: str, start: str, end: str) -> bool:
        try:
            try:
                return self.repository.count_for_range(location_name, start, end) > 0
            except Exception as exc:  # pylint: disable=broad-except
                self.logger.info("Containment query failed (%s), trying alternative method", exc)

            window = DateRange(start=start, end=end)
            return any(window.matches(stored) for stored in self.repository.date_ranges_for(location_name))
        except Exception as exc:  # pylint: disable=broad-except
            self.logger.error("Error checking existing weather data for %s: %s", location_name, exc)
            return False
