"""Harness adapters that run Python code in-process under stdout capture."""

from __future__ import annotations

import runpy
from collections.abc import Callable
from pathlib import Path

from ..exceptions import HarnessError
from .base import Harness
from .capture import LineHandler, OutputCapture


class CallableHarness(Harness):
    """Runs a Python callable and captures what it prints."""

    name = "callable"

    def __init__(self, func: Callable[[], object], echo: bool = False) -> None:
        self.func = func
        self.echo = echo

    def describe(self) -> str:
        return getattr(self.func, "__name__", repr(self.func))

    def _invoke(self) -> None:
        self.func()

    def run(self, on_line: LineHandler) -> None:
        capture = OutputCapture(echo=self.echo)
        capture.on_line(on_line)
        try:
            with capture:
                self._invoke()
        except HarnessError:
            raise
        except SystemExit as e:
            if e.code not in (None, 0):
                raise HarnessError(f"{self.describe()} exited with code {e.code}") from e
        except Exception as e:
            raise HarnessError(f"{self.describe()} raised {type(e).__name__}: {e}") from e


class ScriptHarness(CallableHarness):
    """Executes a Python script file as ``__main__``."""

    name = "script"

    def __init__(self, path: Path, echo: bool = False) -> None:
        super().__init__(func=self._invoke, echo=echo)
        self.path = Path(path)

    def describe(self) -> str:
        return str(self.path)

    def _invoke(self) -> None:
        if not self.path.is_file():
            raise HarnessError(f"Harness script not found: {self.path}")
        runpy.run_path(str(self.path), run_name="__main__")
