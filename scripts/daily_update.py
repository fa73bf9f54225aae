#!/usr/bin/env python3
"""
Daily weather update for cron.

Runs one skip-existing batch with two retries and logs to
logs/weather-update-YYYY-MM-DD.log as well as the console.
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cityweather.cli import daily_main  # noqa: E402


if __name__ == "__main__":
    sys.exit(daily_main())
