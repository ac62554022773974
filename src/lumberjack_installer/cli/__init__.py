"""CLI helpers exposed for other modules."""

from .ui import StepTracker, failure_panel, updates_table

__all__ = ["StepTracker", "failure_panel", "updates_table"]
