"""Shared test fixtures for sunctally."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
import structlog

from sunctally.registry import FunctionRegistry
from sunctally.watcher.session import SessionAggregator


class SteppingClock:
    """Clock that advances one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(seconds=1)
        return current


@pytest.fixture
def registry() -> FunctionRegistry:
    """Registry built from the built-in catalog."""
    return FunctionRegistry.default()


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def aggregator(registry: FunctionRegistry, clock: SteppingClock) -> SessionAggregator:
    """Aggregator with the default total of 90 and a deterministic clock."""
    return SessionAggregator(registry=registry, total_expected=90, clock=clock)


@pytest.fixture
def active_aggregator(aggregator: SessionAggregator) -> SessionAggregator:
    """Aggregator with a run already started."""
    assert aggregator.reset()
    return aggregator


@pytest.fixture
def sample_transcript_lines() -> list[str]:
    """A short harness transcript with banners, results and a duplicate."""
    return [
        "🚀 Starting SUNC compatibility test...",
        "Getting ready to run tests...",
        "✅ checkcaller",
        "✅ getgenv passed",
        "❌ hookfunction failed: expected upvalue",
        "⚠️ getconnections neutral",
        "✅ getgenv passed",
        "ℹ️ request is an alias of http_request",
        "❌ Drawing.new function is nil",
        "🏁 SUNC test completed!",
    ]


@pytest.fixture
def transcript_file(tmp_path: Path, sample_transcript_lines: list[str]) -> Path:
    path = tmp_path / "transcript.txt"
    path.write_text("\n".join(sample_transcript_lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_logging_config():
    """Undo any structlog configuration a CLI invocation applied."""
    yield
    structlog.reset_defaults()
