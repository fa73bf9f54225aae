"""Core utilities for weather collection."""

from .concurrency import run_bounded
from .config import AppConfig, ConfigError, load_app_config, load_locations, load_project_config
from .dates import trailing_window
from .logging_setup import configure_logging, dated_log_file
from .models import BatchSummary, DateRange, Location, ProcessOutcome, WeatherRecord

__all__ = [
    "AppConfig",
    "BatchSummary",
    "ConfigError",
    "DateRange",
    "Location",
    "ProcessOutcome",
    "WeatherRecord",
    "configure_logging",
    "dated_log_file",
    "load_app_config",
    "load_locations",
    "load_project_config",
    "run_bounded",
    "trailing_window",
]
