"""sunctally - verdict-per-function tally for compatibility harness output."""

from .registry import FunctionRegistry, default_registry
from .runner import RunPolicy, RunResult, replay_lines, run_harness
from .schemas.events import LogEntry, ProgressReport, SessionSnapshot, Verdict
from .scoring.progress import percentage, progress_report
from .watcher.classifier import (
    Classification,
    classify_message,
    extract_function_name,
    is_function_test_result,
    make_filter,
)
from .watcher.session import Session, SessionAggregator

__all__ = [
    "Classification",
    "FunctionRegistry",
    "LogEntry",
    "ProgressReport",
    "RunPolicy",
    "RunResult",
    "Session",
    "SessionAggregator",
    "SessionSnapshot",
    "Verdict",
    "classify_message",
    "default_registry",
    "extract_function_name",
    "is_function_test_result",
    "make_filter",
    "percentage",
    "progress_report",
    "replay_lines",
    "run_harness",
]
