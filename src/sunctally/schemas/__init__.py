"""Schema definitions for tally sessions."""

from .events import (
    LogAppended,
    LogEntry,
    ProgressChanged,
    ProgressReport,
    SessionSnapshot,
    StatsChanged,
    TallyEvent,
    Verdict,
)

__all__ = [
    "LogAppended",
    "LogEntry",
    "ProgressChanged",
    "ProgressReport",
    "SessionSnapshot",
    "StatsChanged",
    "TallyEvent",
    "Verdict",
]
