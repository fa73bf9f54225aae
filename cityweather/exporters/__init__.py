"""Run report exporters."""

from .outcome_exporter import OutcomeExporter

__all__ = ["OutcomeExporter"]
