"""Progress calculation from tally counts."""

from ..schemas.events import ProgressReport


def percentage(current: int, total: int) -> int:
    """Calculate the whole-number percentage complete.

    Formula: floor(min(current, total) / total * 100), computed in integers
    so that values like 29/100 do not round down through float error.

    Args:
        current: Distinct results counted so far
        total: Expected number of results, must be positive

    Returns:
        Percentage between 0 and 100
    """
    if total <= 0:
        raise ValueError(f"total must be positive, got {total}")
    capped = min(max(current, 0), total)
    return capped * 100 // total


def progress_report(current: int, total: int) -> ProgressReport:
    """Pair the percentage with its capped current/total label."""
    pct = percentage(current, total)
    return ProgressReport(
        percentage=pct,
        current=min(max(current, 0), total),
        total=total,
    )
