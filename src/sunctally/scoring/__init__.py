"""Scoring helpers for tally sessions."""

from .progress import percentage, progress_report

__all__ = ["percentage", "progress_report"]
