"""Event schemas for tracking a tally session."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field


class Verdict(str, Enum):
    """Verdict category assigned to a harness line."""

    PASS = "pass"
    FAIL = "fail"
    NEUTRAL = "neutral"
    INFO = "info"


# Status glyphs the harness prefixes onto its lines
SUCCESS_GLYPHS: tuple[str, ...] = ("✅",)
FAILURE_GLYPHS: tuple[str, ...] = ("❌",)
NEUTRAL_GLYPHS: tuple[str, ...] = ("❕", "‼")
WARNING_GLYPHS: tuple[str, ...] = ("⚠",)
INFO_GLYPHS: tuple[str, ...] = ("ℹ",)
VARIATION_SELECTOR = "\ufe0f"

STATUS_GLYPHS: tuple[str, ...] = (
    SUCCESS_GLYPHS + FAILURE_GLYPHS + NEUTRAL_GLYPHS + WARNING_GLYPHS
)
STRIPPED_GLYPHS: tuple[str, ...] = STATUS_GLYPHS + INFO_GLYPHS + (VARIATION_SELECTOR,)

# Banner and progress lines the harness prints around its results
SKIP_PATTERNS: tuple[str, ...] = (
    "getting",
    "loading",
    "starting",
    "completed",
    "past",
    "debug:",
    "test completed",
    "script loaded",
    "results will appear",
    "sunc test",
    "compatibility test",
    "check the gui",
)

RESULT_KEYWORDS: tuple[str, ...] = (
    "function is nil",
    "neutral",
    "passed",
    "failed",
    "working",
    "not working",
    "error",
    "success",
)

# (verdict, glyphs, keywords) in priority order; first match wins
VERDICT_RULES: list[tuple[Verdict, tuple[str, ...], tuple[str, ...]]] = [
    (Verdict.PASS, SUCCESS_GLYPHS, ("working", "passed")),
    (Verdict.FAIL, FAILURE_GLYPHS, ("function is nil", "failed", "error")),
    (Verdict.NEUTRAL, NEUTRAL_GLYPHS + WARNING_GLYPHS, ("neutral",)),
]


def strip_glyphs(message: str) -> str:
    """Remove every status glyph from ``message``."""
    for glyph in STRIPPED_GLYPHS:
        message = message.replace(glyph, "")
    return message


class LogEntry(BaseModel):
    """One harness line as received, with its classification."""

    model_config = ConfigDict(frozen=True)

    raw_message: str = Field(description="Line exactly as delivered by the harness")
    received_at: datetime = Field(description="Arrival time")
    matched_function: str | None = Field(
        default=None,
        description="Registry function recognized in the line",
    )
    verdict: Verdict = Field(default=Verdict.INFO, description="Assigned verdict")
    counted: bool = Field(
        default=False,
        description="Whether this line incremented the session tally",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display_text(self) -> str:
        """Message with status glyphs removed and leading whitespace trimmed."""
        return strip_glyphs(self.raw_message).lstrip()

    @property
    def clock(self) -> str:
        """Arrival time as HH:MM:SS in local time."""
        return self.received_at.astimezone().strftime("%H:%M:%S")


class ProgressReport(BaseModel):
    """Percentage complete paired with its current/total label."""

    model_config = ConfigDict(frozen=True)

    percentage: int = Field(ge=0, le=100)
    current: int = Field(ge=0)
    total: int = Field(gt=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def label(self) -> str:
        return f"{self.current}/{self.total}"


class LogAppended(BaseModel):
    """Emitted for every recorded line."""

    kind: Literal["log_appended"] = "log_appended"
    entry: LogEntry


class StatsChanged(BaseModel):
    """Emitted when a counted result changes the tally."""

    kind: Literal["stats_changed"] = "stats_changed"
    passed: int
    timeout: int
    failed: int


class ProgressChanged(BaseModel):
    """Emitted when progress moves."""

    kind: Literal["progress_changed"] = "progress_changed"
    percentage: int
    current: int
    total: int


TallyEvent = LogAppended | StatsChanged | ProgressChanged


class SessionSnapshot(BaseModel):
    """Immutable copy of a session's aggregate state."""

    model_config = ConfigDict(frozen=True)

    passed: int
    timeout: int
    failed: int
    total_expected: int
    actual_count: int
    active: bool
    status: Literal["idle", "running", "completed"]
    processed_functions: tuple[str, ...] = Field(default=())
    log: tuple[LogEntry, ...] = Field(default=())
    elapsed_seconds: float = 0.0
