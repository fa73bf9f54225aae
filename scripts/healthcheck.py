#!/usr/bin/env python3
"""
Health check for the CDO token and station coverage of each location.
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cityweather.cli import healthcheck_main  # noqa: E402


if __name__ == "__main__":
    sys.exit(healthcheck_main())
