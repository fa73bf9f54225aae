"""NOAA Climate Data Online (CDO v2) client for GHCND daily summaries."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

import requests

from .request_utils import build_request_headers, text_excerpt


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.ncdc.noaa.gov/cdo-web/api/v2"
DATASET_ID = "GHCND"
RATE_LIMIT_STATUS = 429


class NoaaCdoError(RuntimeError):
    """Base class for errors raised while talking to the CDO API."""


class ConfigurationError(NoaaCdoError):
    """Raised when the CDO client is missing required configuration."""


class TransportError(NoaaCdoError):
    """Raised when no usable HTTP response was received (connection, timeout)."""


class ApiError(NoaaCdoError):
    """Raised when the CDO API responds with an error status or an unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(ApiError):
    """Raised when the CDO API answers HTTP 429."""


def _format_date(value: Union[str, dt.date]) -> str:
    if isinstance(value, str):
        token = value.strip()
        if not token:
            raise ValueError("Date string cannot be empty.")
        return token
    if isinstance(value, dt.date):
        return value.isoformat()
    raise TypeError("Date must be a string or date instance.")


class NoaaCdoClient:
    """
    Thin wrapper over the CDO v2 REST endpoints used by the collector.

    Transport failures and API failures are raised as different exception
    types so callers can tell a dropped connection from an HTTP 429.
    """

    def __init__(
        self,
        token: Optional[str],
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not token:
            raise ConfigurationError(
                "A CDO access token is required. Request one at https://www.ncdc.noaa.gov/cdo-web/token"
            )
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, endpoint: str, params: Mapping[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        headers = build_request_headers(self.token)
        try:
            resp = self.session.get(url, params=dict(params), headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError(f"CDO request to /{endpoint} failed: {exc}") from exc

        status = resp.status_code
        if status == RATE_LIMIT_STATUS:
            raise RateLimitError(f"CDO rate limit hit on /{endpoint}", status_code=status)
        if status >= 400:
            raise ApiError(f"CDO error {status} on /{endpoint}: {text_excerpt(resp.text)}", status_code=status)

        if not resp.content:
            # /data answers 200 with an empty body when the window has no observations.
            return {}
        try:
            payload = resp.json()
        except ValueError as exc:
            raise ApiError(f"CDO returned a non-JSON payload on /{endpoint}: {text_excerpt(resp.text)}", status_code=status) from exc
        if not isinstance(payload, dict):
            raise ApiError(f"CDO returned an unexpected JSON payload on /{endpoint}.", status_code=status)
        return payload

    def check_token(self) -> bool:
        """Probe ``/datasets?limit=1``; True when the token is accepted."""
        logger.info("Testing NOAA CDO API token validity...")
        try:
            self._get("datasets", {"limit": 1})
        except NoaaCdoError as exc:
            logger.error("API token test failed: %s", exc)
            return False
        logger.info("API token is valid!")
        return True

    def find_stations(
        self,
        latitude: Union[str, float],
        longitude: Union[str, float],
        *,
        radius: int = 25,
        limit: int = 5,
    ) -> List[Dict[str, Any]]:
        """Return GHCND stations within ``radius`` of the point, sorted by name."""
        payload = self._get(
            "stations",
            {
                "datasetid": DATASET_ID,
                "latitude": latitude,
                "longitude": longitude,
                "radius": radius,
                "limit": limit,
                "sortfield": "name",
                "sortorder": "asc",
            },
        )
        results = payload.get("results")
        return list(results) if isinstance(results, list) else []

    def find_nearest_station(
        self,
        latitude: Union[str, float],
        longitude: Union[str, float],
        *,
        radius: int = 25,
    ) -> Optional[Dict[str, Any]]:
        stations = self.find_stations(latitude, longitude, radius=radius)
        return stations[0] if stations else None

    def get_daily_data(
        self,
        station_id: str,
        start_date: Union[str, dt.date],
        end_date: Union[str, dt.date],
        *,
        limit: int = 1000,
        units: str = "standard",
    ) -> Dict[str, Any]:
        """Return the raw GHCND ``/data`` payload for a station and window."""
        return self._get(
            "data",
            {
                "datasetid": DATASET_ID,
                "stationid": station_id,
                "startdate": _format_date(start_date),
                "enddate": _format_date(end_date),
                "limit": limit,
                "units": units,
            },
        )

    def close(self) -> None:
        self.session.close()
