"""Run driver: resets a session, runs a harness and applies the completion policy."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from .config import RunSettings, settings
from .exceptions import HarnessError
from .harness.base import Harness
from .schemas.events import ProgressReport, SessionSnapshot
from .watcher.session import SessionAggregator

logger = structlog.get_logger(__name__)

START_BANNER = "🚀 Starting SUNC compatibility test..."
LOAD_BANNER = "📥 Loading harness script..."
LOADED_BANNER = "✅ Harness script loaded successfully"
RESULTS_BANNER = "📊 Test results will appear above..."


@dataclass(frozen=True, slots=True)
class RunPolicy:
    """Timing policy for a run.

    The harness gives no completion signal, so a run is declared complete a
    fixed ``completion_wait_sec`` after the harness returns.
    """

    load_delay_sec: float = 1.0
    completion_wait_sec: float = 5.0

    @classmethod
    def from_settings(cls, run_settings: RunSettings | None = None) -> RunPolicy:
        run_settings = run_settings or settings.run
        return cls(
            load_delay_sec=run_settings.load_delay_sec,
            completion_wait_sec=run_settings.completion_wait_sec,
        )


@dataclass(frozen=True, slots=True)
class RunResult:
    """Outcome of a driven run."""

    started: bool
    progress: ProgressReport
    snapshot: SessionSnapshot
    harness_error: str | None = None


def run_harness(
    harness: Harness,
    aggregator: SessionAggregator,
    *,
    policy: RunPolicy | None = None,
    total_expected: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RunResult:
    """Drive one complete run of ``harness`` into ``aggregator``.

    Harness failures are recorded as a log line and the run still finishes.

    Args:
        harness: Harness producing output lines
        aggregator: Session aggregator receiving the lines
        policy: Timing policy, defaults to configured values
        total_expected: Expected result count for this run
        sleep: Sleep function, injectable for tests

    Returns:
        RunResult with final progress and a session snapshot
    """
    policy = policy or RunPolicy.from_settings()

    if not aggregator.reset(total_expected):
        return RunResult(
            started=False,
            progress=aggregator.progress(),
            snapshot=aggregator.get_session(),
        )

    logger.info("run_started", harness=harness.describe())
    harness_error: str | None = None
    try:
        aggregator.record(START_BANNER)
        aggregator.record(LOAD_BANNER)
        sleep(policy.load_delay_sec)

        try:
            harness.run(aggregator.record)
        except HarnessError as e:
            harness_error = str(e)
            logger.warning("harness_failed", harness=harness.describe(), error=harness_error)
        except Exception as e:
            harness_error = f"{type(e).__name__}: {e}"
            logger.exception("harness_crashed", harness=harness.describe())
        else:
            aggregator.record(LOADED_BANNER)
            aggregator.record(RESULTS_BANNER)

        if harness_error is not None:
            aggregator.record(f"❌ Harness failed to load: {harness_error}")
        sleep(policy.completion_wait_sec)
    finally:
        progress = aggregator.finish()

    return RunResult(
        started=True,
        progress=progress,
        snapshot=aggregator.get_session(),
        harness_error=harness_error,
    )


def replay_lines(
    lines: list[str],
    aggregator: SessionAggregator,
    total_expected: int | None = None,
) -> RunResult:
    """Feed a saved transcript through a fresh session, without timing policy."""
    if not aggregator.reset(total_expected):
        return RunResult(
            started=False,
            progress=aggregator.progress(),
            snapshot=aggregator.get_session(),
        )

    try:
        for line in lines:
            aggregator.record(line)
    finally:
        progress = aggregator.finish()

    return RunResult(started=True, progress=progress, snapshot=aggregator.get_session())
