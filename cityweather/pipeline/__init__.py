"""Batch collection pipeline."""

from .batch import BatchAbortedError, BatchOptions, BatchRunner, run_batch
from .checker import ExistingDataChecker
from .fetcher import HistoricalWeatherFetcher
from .processor import DryRunWriter, LocationProcessor

__all__ = [
    "BatchAbortedError",
    "BatchOptions",
    "BatchRunner",
    "DryRunWriter",
    "ExistingDataChecker",
    "HistoricalWeatherFetcher",
    "LocationProcessor",
    "run_batch",
]
