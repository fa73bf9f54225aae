"""Command-line entry points for the collector."""

from __future__ import annotations

import argparse
import datetime as dt
import logging
from typing import Optional, Sequence

from .clients.noaa_cdo import NoaaCdoClient, NoaaCdoError
from .core.config import AppConfig, ConfigError, load_app_config
from .core.logging_setup import configure_logging, dated_log_file
from .exporters import OutcomeExporter
from .pipeline.batch import BatchAbortedError, BatchOptions, run_batch
from .storage.db import init_db
from .storage.repository import WeatherRepository


logger = logging.getLogger("cityweather")

DAILY_MAX_RETRIES = 2
DAILY_CONCURRENCY = 3


def _load_config(path: Optional[str], *, require_database: bool = True) -> AppConfig:
    config = load_app_config(path).validate(require_database=require_database)
    logging.getLogger().setLevel(config.log_level)
    return config


def build_batch_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cityweather-batch",
        description="Fetch the trailing week of NOAA daily summaries for every active city",
    )
    parser.add_argument("--limit", type=int, default=None, help="Process at most N cities (0 = no limit)")
    parser.add_argument("--force", action="store_true", help="Fetch even when data for the window already exists")
    parser.add_argument("--retries", type=int, default=None, help="Retries per city after the first attempt (default 1)")
    parser.add_argument("--concurrency", type=int, default=None, help="Cities processed at once (default 3)")
    parser.add_argument("--config", type=str, default=None, help="Path to config.json")
    parser.add_argument(
        "--source",
        choices=("database", "config"),
        default="database",
        help="Read active cities from the database or from the config 'locations' block",
    )
    parser.add_argument("--dry-run", action="store_true", help="Fetch but do not write to the store")
    parser.add_argument("--report", type=str, default=None, help="Write a per-city CSV report to this path")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    parser.add_argument("--log-file", type=str, default=None, help="Also log to this file")
    return parser


def batch_main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one batch. Returns 0 on completion (item failures included), 1 otherwise."""
    args = build_batch_parser().parse_args(argv)

    try:
        configure_logging(args.log_file)
        config = _load_config(args.config)
        options = BatchOptions(
            limit=args.limit if args.limit is not None else config.limit,
            skip_existing=not args.force,
            max_retries=args.retries if args.retries is not None else config.max_retries,
            concurrency=max(1, args.concurrency if args.concurrency is not None else config.concurrency),
            show_progress=args.progress,
            dry_run=args.dry_run,
        )
        summary = run_batch(config, options, source=args.source, logger=logger)
        if args.report:
            OutcomeExporter().export(summary, args.report)
    except (ConfigError, BatchAbortedError) as exc:
        logger.error("%s", exc)
        return 1
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Error during batch weather data fetching: %s", exc)
        return 1
    return 0


def daily_main(argv: Optional[Sequence[str]] = None) -> int:
    """Cron entry point: skip existing, two retries, console plus dated log file."""
    parser = argparse.ArgumentParser(prog="cityweather-daily", description="Daily weather data update")
    parser.add_argument("--config", type=str, default=None, help="Path to config.json")
    parser.add_argument("--log-dir", type=str, default=None, help="Directory for the dated log file")
    args = parser.parse_args(argv)

    try:
        config = load_app_config(args.config)
    except ConfigError as exc:
        configure_logging()
        logger.error("%s", exc)
        return 1

    log_file = dated_log_file(args.log_dir or config.log_dir)
    configure_logging(log_file, level=config.log_level)
    logger.info("Weather update started at %s", dt.datetime.now(dt.timezone.utc).isoformat())

    exit_code = 0
    try:
        logger.info("Starting daily weather data update...")
        run_batch(
            config,
            BatchOptions(skip_existing=True, max_retries=DAILY_MAX_RETRIES, concurrency=DAILY_CONCURRENCY),
            logger=logger,
        )
        logger.info("Daily weather update completed successfully!")
    except (ConfigError, BatchAbortedError) as exc:
        logger.error("Failed to complete daily weather update: %s", exc)
        exit_code = 1
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Failed to complete daily weather update: %s", exc)
        exit_code = 1
    finally:
        logger.info("Weather update finished at %s", dt.datetime.now(dt.timezone.utc).isoformat())
    return exit_code


def healthcheck_main(argv: Optional[Sequence[str]] = None) -> int:
    """Probe the token and the nearest station for each location. Returns 1 if any check fails."""
    parser = argparse.ArgumentParser(prog="cityweather-healthcheck", description="CDO connectivity check")
    parser.add_argument("--config", type=str, default=None, help="Path to config.json")
    parser.add_argument("--source", choices=("database", "config"), default="config")
    args = parser.parse_args(argv)
    configure_logging()

    try:
        config = _load_config(args.config, require_database=args.source == "database")
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1

    client = NoaaCdoClient(config.token, base_url=config.base_url, timeout=config.timeout)
    try:
        if not client.check_token():
            return 1
        if args.source == "database":
            locations = WeatherRepository(init_db(config.database_url)).get_active_locations()
        else:
            locations = config.locations

        missing = 0
        for location in locations:
            try:
                station = client.find_nearest_station(
                    location.latitude, location.longitude, radius=config.search_radius
                )
            except NoaaCdoError as exc:
                logger.error("%s: station lookup failed: %s", location.name, exc)
                missing += 1
                continue
            if station:
                logger.info("%s: %s (%s)", location.name, station.get("name"), station.get("id"))
            else:
                logger.warning("%s: no station within %d", location.name, config.search_radius)
                missing += 1
        logger.info("Checked %d locations, %d without a usable station", len(locations), missing)
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Healthcheck failed: %s", exc)
        return 1
    finally:
        client.close()
    return 1 if missing else 0
