"""CSV report of a batch run, one row per location."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import pandas as pd

from ..core.models import BatchSummary


logger = logging.getLogger(__name__)

COLUMNS = ["location", "status", "station_id", "station_name", "observations", "start", "end", "error"]


class OutcomeExporter:
    """Turns a BatchSummary into a DataFrame and writes it as CSV."""

    def to_frame(self, summary: BatchSummary) -> pd.DataFrame:
        window = summary.date_range
        rows = []
        for outcome in summary.outcomes:
            record = outcome.data
            rows.append(
                {
                    "location": outcome.location.name,
                    "status": outcome.status,
                    "station_id": record.station_id if record else None,
                    "station_name": record.station_name if record else None,
                    "observations": record.observation_count if record else 0,
                    "start": window.start if window else None,
                    "end": window.end if window else None,
                    "error": str(outcome.error) if outcome.error is not None else None,
                }
            )
        return pd.DataFrame(rows, columns=COLUMNS)

    def export(self, summary: BatchSummary, output_path: Union[str, Path]) -> Path:
        """
        Write the report CSV.

        Returns:
            The path written.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        df = self.to_frame(summary)
        df.to_csv(path, index=False)
        logger.info(f"Wrote run report for {len(df)} locations to {path}")
        return path
