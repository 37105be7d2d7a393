"""Base class for harness adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .capture import LineHandler


class Harness(ABC):
    """Something that produces free-text test output line by line.

    Implementations call ``on_line`` once per output line from the calling
    thread and raise :class:`~sunctally.exceptions.HarnessError` when the
    harness cannot be launched or exits abnormally.
    """

    name: str = "harness"

    @abstractmethod
    def run(self, on_line: LineHandler) -> None:
        """Execute the harness, delivering each output line to ``on_line``."""

    def describe(self) -> str:
        return self.name
