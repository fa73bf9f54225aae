from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import and_, func, select, type_coerce
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..core.models import Location, WeatherRecord
from .db import session_scope
from .models import City, WeatherData


class WeatherRepository:
    """
    Record store used by the pipeline: reads the active city list, answers
    existence questions for a location/window and inserts fetched records.

    Nothing here locks; two writers can both insert the same window.
    """

    def __init__(self, session_factory: sessionmaker, *, logger: Optional[logging.Logger] = None) -> None:
        self._session_factory = session_factory
        self.logger = logger or logging.getLogger(__name__)

    def get_active_locations(self) -> List[Location]:
        with session_scope(self._session_factory) as session:
            rows = session.execute(
                select(City.id, City.display_name, City.latitude, City.longitude)
                .where(City.active.is_(True))
                .order_by(City.id)
            ).all()
        locations: List[Location] = []
        for city_id, name, lat, lon in rows:
            try:
                locations.append(Location.from_coordinates(name, lat, lon))
            except ValueError as exc:
                self.logger.warning("Skipping city %s: %s", city_id, exc)
        return locations

    def count_for_range(self, location_name: str, start: str, end: str) -> int:
        """
        Count records for the location whose ``date_range`` is ``{start, end}``.

        PostgreSQL uses JSONB containment; other backends compare the two JSON
        members. Raises SQLAlchemyError if the backend cannot evaluate it.
        """
        with session_scope(self._session_factory) as session:
            if session.get_bind().dialect.name == "postgresql":
                predicate = type_coerce(WeatherData.date_range, JSONB).contains({"start": start, "end": end})
            else:
                predicate = and_(
                    WeatherData.date_range["start"].as_string() == start,
                    WeatherData.date_range["end"].as_string() == end,
                )
            stmt = (
                select(func.count(WeatherData.id))
                .where(WeatherData.location_name == location_name)
                .where(predicate)
            )
            return int(session.execute(stmt).scalar_one())

    def date_ranges_for(self, location_name: str) -> List[Any]:
        """Return every stored ``date_range`` value for the location."""
        with session_scope(self._session_factory) as session:
            return list(
                session.execute(
                    select(WeatherData.date_range).where(WeatherData.location_name == location_name)
                ).scalars()
            )

    def insert(self, record: WeatherRecord) -> bool:
        """Insert one record. Errors are logged and reported as False, never raised."""
        try:
            with session_scope(self._session_factory) as session:
                session.add(WeatherData(**record.to_row()))
        except SQLAlchemyError as exc:
            self.logger.error("Error storing historical weather data for %s: %s", record.location_name, exc)
            return False
        self.logger.info("Successfully stored historical weather data for %s", record.location_name)
        return True

    def count_records(self, location_name: Optional[str] = None) -> int:
        with session_scope(self._session_factory) as session:
            stmt = select(func.count(WeatherData.id))
            if location_name is not None:
                stmt = stmt.where(WeatherData.location_name == location_name)
            return int(session.execute(stmt).scalar_one())

    def add_cities(self, cities: Iterable[Mapping[str, Any]]) -> int:
        """Insert city rows (keys match the ``cities`` columns). Returns the count added."""
        rows: List[Dict[str, Any]] = [dict(city) for city in cities]
        with session_scope(self._session_factory) as session:
            for row in rows:
                row.setdefault("display_name", row.get("name"))
                session.add(City(**row))
        return len(rows)
