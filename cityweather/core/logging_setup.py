from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import List, Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def dated_log_file(log_dir: Union[str, Path], prefix: str = "weather-update", day: Optional[dt.date] = None) -> Path:
    """Return ``<log_dir>/<prefix>-YYYY-MM-DD.log``, creating the directory."""
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    day = day or dt.date.today()
    return directory / f"{prefix}-{day.isoformat()}.log"


def configure_logging(
    log_file: Union[str, Path, None] = None,
    *,
    console: bool = True,
    level: Union[int, str] = logging.INFO,
) -> None:
    """
    Configure root logging with a file handler, a console handler, or both.

    The pipeline only talks to ``logging.Logger`` objects, so any handler mix
    works the same way.
    """
    handlers: List[logging.Handler] = []
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, mode="a", encoding="utf-8"))
    if console or not handlers:
        handlers.append(logging.StreamHandler())

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    # urllib3 logs every connection at DEBUG; keep it quiet unless asked.
    logging.getLogger("urllib3").setLevel(logging.WARNING)
