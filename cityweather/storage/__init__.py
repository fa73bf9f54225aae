"""Relational storage for cities and collected weather records."""

from .db import init_db, session_scope
from .locations import ConfigLocationSource
from .repository import WeatherRepository

__all__ = [
    "ConfigLocationSource",
    "WeatherRepository",
    "init_db",
    "session_scope",
]
