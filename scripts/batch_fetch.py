#!/usr/bin/env python3
"""
Fetch the trailing week of NOAA daily summaries for the active cities.

Usage:
    python scripts/batch_fetch.py --limit=5 --retries=2 --concurrency=3 [--force]
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cityweather.cli import batch_main  # noqa: E402


if __name__ == "__main__":
    sys.exit(batch_main())
