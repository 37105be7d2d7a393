"""Harness adapters and output capture."""

from __future__ import annotations

from pathlib import Path

from .base import Harness
from .capture import LineHandler, OutputCapture
from .command import CommandHarness
from .python import CallableHarness, ScriptHarness


def build_harness(
    command: str | None = None,
    script: Path | None = None,
    timeout_sec: int | None = None,
) -> Harness:
    """Resolve exactly one of ``command`` or ``script`` to a harness."""
    if (command is None) == (script is None):
        raise ValueError("Provide exactly one of command or script")
    if command is not None:
        return CommandHarness(command, timeout_sec=timeout_sec)
    return ScriptHarness(script)


__all__ = [
    "CallableHarness",
    "CommandHarness",
    "Harness",
    "LineHandler",
    "OutputCapture",
    "ScriptHarness",
    "build_harness",
]
