from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from dotenv import find_dotenv, load_dotenv

from .models import Location

PROVIDER_KEY = "noaa_cdo"
DEFAULT_BASE_URL = "https://www.ncdc.noaa.gov/cdo-web/api/v2"
DEFAULT_CONFIG_PATH = Path("config.json")

TOKEN_ENV = "NOAA_CDO_TOKEN"
DATABASE_URL_ENV = "DATABASE_URL"


class ConfigError(RuntimeError):
    """Raised when the project configuration cannot be loaded or is incomplete."""


def load_project_config(path: Union[str, Path]) -> dict:
    """Return the parsed configuration dictionary from ``config.json``."""
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")
    try:
        config = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:  # pragma: no cover - invalid user config
        raise ConfigError(f"Config file {config_path} contains invalid JSON.") from exc
    if not isinstance(config, Mapping):
        raise ConfigError(f"Config file {config_path} must contain a JSON object.")
    return dict(config)


def load_locations(config: Mapping[str, object]) -> List[Location]:
    """Build the configured ``locations`` mapping into Location values, in file order."""
    raw_locations = config.get("locations") if isinstance(config, Mapping) else None
    if raw_locations is None:
        return []
    if not isinstance(raw_locations, Mapping):
        raise ConfigError("The configuration 'locations' entry must be an object.")

    locations: List[Location] = []
    for name, coords in raw_locations.items():
        if not isinstance(coords, Mapping):
            raise ConfigError(f"Location '{name}' must be an object with 'lat'/'lon'.")
        try:
            float(coords["lat"])
            float(coords["lon"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid coordinates for location '{name}'.") from exc
        locations.append(Location.from_coordinates(name, coords["lat"], coords["lon"]))
    return locations


def provider_setting(config: Mapping[str, object], provider: str, key: str, default=None):
    """Read a provider-specific setting from the loaded config."""
    providers = config.get("providers") if isinstance(config, Mapping) else None
    if not isinstance(providers, Mapping):
        return default
    provider_cfg = providers.get(provider)
    if not isinstance(provider_cfg, Mapping):
        return default
    return provider_cfg.get(key, default)


def _section(config: Mapping[str, object], key: str) -> Mapping[str, object]:
    value = config.get(key)
    return value if isinstance(value, Mapping) else {}


@dataclass(frozen=True)
class AppConfig:
    """Explicit configuration handed to the batch entry points."""

    token: Optional[str]
    database_url: Optional[str]
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 60.0
    retry_delay: float = 2.0
    rate_limit_delay: float = 10.0
    search_radius: int = 25
    limit: int = 0
    concurrency: int = 3
    max_retries: int = 1
    log_dir: Path = Path("logs")
    log_level: str = "INFO"
    locations: List[Location] = field(default_factory=list)

    def validate(self, *, require_database: bool = True) -> "AppConfig":
        missing = []
        if not self.token:
            missing.append(f"{TOKEN_ENV} (providers.{PROVIDER_KEY}.token)")
        if require_database and not self.database_url:
            missing.append(f"{DATABASE_URL_ENV} (database.url)")
        if missing:
            raise ConfigError("Missing required configuration values: " + ", ".join(missing))
        return self

    @classmethod
    def from_mapping(cls, config: Mapping[str, object], env: Optional[Mapping[str, str]] = None) -> "AppConfig":
        env = os.environ if env is None else env
        database = _section(config, "database")
        batch = _section(config, "batch")
        logging_cfg = _section(config, "logging")

        def setting(key: str, default=None):
            return provider_setting(config, PROVIDER_KEY, key, default)

        try:
            return cls(
                token=env.get(TOKEN_ENV) or setting("token"),
                database_url=env.get(DATABASE_URL_ENV) or database.get("url"),
                base_url=str(setting("baseUrl", DEFAULT_BASE_URL)).rstrip("/"),
                timeout=float(setting("timeoutSeconds", 60)),
                retry_delay=float(setting("retryDelaySeconds", 2)),
                rate_limit_delay=float(setting("rateLimitCooldownSeconds", 10)),
                search_radius=int(setting("searchRadius", 25)),
                limit=int(batch.get("limit", 0)),
                concurrency=int(batch.get("concurrency", 3)),
                max_retries=int(batch.get("maxRetries", 1)),
                log_dir=Path(str(logging_cfg.get("dir", "logs"))),
                log_level=str(logging_cfg.get("level", "INFO")).upper(),
                locations=load_locations(config),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid configuration value: {exc}") from exc


def load_app_config(
    path: Union[str, Path, None] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    dotenv: bool = True,
) -> AppConfig:
    """
    Load configuration from the JSON file (optional) and environment.

    A missing config file is fine when the environment carries the required
    values; ``validate()`` is left to the caller so that it happens once, at
    the entry point.
    """
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config: Dict[str, object] = {}
    if config_path.exists():
        config = load_project_config(config_path)
    elif path is not None:
        raise ConfigError(f"Config file not found: {config_path}")
    return AppConfig.from_mapping(config, env=env)
