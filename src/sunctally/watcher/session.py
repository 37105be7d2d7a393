"""Session state and aggregation of classified harness lines."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

from ..config import settings
from ..registry import FunctionRegistry, default_registry
from ..schemas.events import (
    LogAppended,
    LogEntry,
    ProgressChanged,
    ProgressReport,
    SessionSnapshot,
    StatsChanged,
    TallyEvent,
    Verdict,
)
from ..scoring.progress import progress_report
from .classifier import classify_message, make_filter

logger = structlog.get_logger(__name__)

Listener = Callable[[TallyEvent], None]

_COUNTER_FOR_VERDICT = {
    Verdict.PASS: "passed",
    Verdict.FAIL: "failed",
    Verdict.NEUTRAL: "timeout",
}


@dataclass
class Session:
    """Mutable aggregate state for one test run."""

    total_expected: int = 90
    passed: int = 0
    timeout: int = 0
    failed: int = 0
    processed_functions: set[str] = field(default_factory=set)
    actual_count: int = 0
    active: bool = False
    log: list[LogEntry] = field(default_factory=list)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def status(self) -> str:
        if self.active:
            return "running"
        if self.finished_at is not None:
            return "completed"
        return "idle"

    def elapsed_seconds(self, now: datetime | None = None) -> float:
        """Seconds since the run started, frozen once it finishes."""
        if self.started_at is None:
            return 0.0
        end = self.finished_at or now or datetime.now(UTC)
        return max((end - self.started_at).total_seconds(), 0.0)


class SessionAggregator:
    """Applies harness lines to a session and notifies listeners."""

    def __init__(
        self,
        registry: FunctionRegistry | None = None,
        total_expected: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.registry = registry or default_registry
        self.default_total = (
            settings.run.total_expected if total_expected is None else total_expected
        )
        if self.default_total <= 0:
            raise ValueError(f"total_expected must be positive, got {self.default_total}")
        self.clock = clock or (lambda: datetime.now(UTC))
        self.session = Session(total_expected=self.default_total)
        self._listeners: list[Listener] = []
        self._final_progress: ProgressReport | None = None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for tally events.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: TallyEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("listener_failed", event_kind=event.kind)

    def reset(self, total_expected: int | None = None) -> bool:
        """Start a fresh run.

        Args:
            total_expected: Expected result count, defaults to the configured value

        Returns:
            False if a run is already active, True otherwise
        """
        if self.session.active:
            logger.warning("reset_rejected", reason="test already in progress")
            return False

        total = self.default_total if total_expected is None else total_expected
        if total <= 0:
            logger.warning("reset_rejected", reason="total_expected must be positive", total=total)
            return False

        self.session = Session(
            total_expected=total,
            active=True,
            started_at=self.clock(),
        )
        self._final_progress = None
        logger.debug("session_reset", total_expected=total)

        report = self.progress()
        self._emit(StatsChanged(passed=0, timeout=0, failed=0))
        self._emit(
            ProgressChanged(percentage=report.percentage, current=report.current, total=report.total)
        )
        return True

    def record(self, message: str) -> LogEntry | None:
        """Classify one harness line and apply it to the session.

        Args:
            message: Raw harness line

        Returns:
            The appended LogEntry, or None if the input was rejected or no
            run is active
        """
        if not isinstance(message, str):
            logger.warning(
                "invalid_message",
                expected="str",
                got=type(message).__name__,
            )
            return None

        session = self.session
        if not session.active:
            logger.warning("record_rejected", reason="no test in progress", status=session.status)
            return None

        result = classify_message(message, self.registry)
        function_name = result.function_name

        counted = (
            result.is_result
            and function_name is not None
            and result.verdict is not Verdict.INFO
            and function_name not in session.processed_functions
        )

        if counted:
            session.processed_functions.add(function_name)
            session.actual_count += 1
            counter = _COUNTER_FOR_VERDICT[result.verdict]
            setattr(session, counter, getattr(session, counter) + 1)

        entry = LogEntry(
            raw_message=message,
            received_at=self.clock(),
            matched_function=function_name,
            verdict=result.verdict,
            counted=counted,
        )
        session.log.append(entry)

        self._emit(LogAppended(entry=entry))
        if counted:
            logger.debug("result_counted", function=function_name, verdict=result.verdict.value)
            self._emit(
                StatsChanged(passed=session.passed, timeout=session.timeout, failed=session.failed)
            )
            report = self.progress()
            self._emit(
                ProgressChanged(
                    percentage=report.percentage,
                    current=report.current,
                    total=report.total,
                )
            )

        return entry

    def finish(self) -> ProgressReport:
        """Mark the run complete and lock the displayed total.

        When results were observed the total becomes the observed count. When
        none were, the configured total is kept and the run still reports
        100%, since a silent harness cannot be told apart from a finished one.
        """
        session = self.session
        session.active = False
        session.finished_at = self.clock()

        if session.actual_count > 0:
            session.total_expected = session.actual_count
            report = progress_report(session.actual_count, session.actual_count)
        else:
            logger.warning("no_results_detected", total_expected=session.total_expected)
            report = progress_report(session.total_expected, session.total_expected)

        self._final_progress = report
        self._emit(
            ProgressChanged(percentage=report.percentage, current=report.current, total=report.total)
        )
        logger.info(
            "session_finished",
            passed=session.passed,
            timeout=session.timeout,
            failed=session.failed,
            total=report.total,
        )
        return report

    def progress(self) -> ProgressReport:
        """Current progress, or the final report once the run finished."""
        if self._final_progress is not None:
            return self._final_progress
        return progress_report(self.session.actual_count, self.session.total_expected)

    def get_session(self) -> SessionSnapshot:
        """Immutable snapshot of the current session."""
        session = self.session
        return SessionSnapshot(
            passed=session.passed,
            timeout=session.timeout,
            failed=session.failed,
            total_expected=session.total_expected,
            actual_count=session.actual_count,
            active=session.active,
            status=session.status,
            processed_functions=tuple(sorted(session.processed_functions)),
            log=tuple(session.log),
            elapsed_seconds=session.elapsed_seconds(self.clock()),
        )

    def filter_log(self, term: str) -> list[LogEntry]:
        """Log entries whose raw message contains ``term``, case-insensitively."""
        predicate = make_filter(term)
        return [entry for entry in self.session.log if predicate(entry)]

    def summary(self) -> dict:
        """Get summary of the session."""
        session = self.session
        report = self.progress()
        return {
            "status": session.status,
            "passed": session.passed,
            "timeout": session.timeout,
            "failed": session.failed,
            "counted": session.actual_count,
            "total": report.total,
            "percentage": report.percentage,
            "progress": report.label,
            "lines": len(session.log),
            "elapsed_sec": round(session.elapsed_seconds(self.clock()), 1),
        }
