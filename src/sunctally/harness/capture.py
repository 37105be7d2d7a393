"""Scoped capture of harness output written to stdout."""

from __future__ import annotations

import io
import sys
from collections.abc import Callable
from contextlib import redirect_stdout
from typing import TextIO

LineHandler = Callable[[str], None]


class _LineTee(io.TextIOBase):
    """Text stream that forwards complete lines to a callback.

    Text written while the callback itself runs (log output, for instance)
    goes straight to the original stream and is never fed back.
    """

    def __init__(self, deliver: LineHandler, original: TextIO, echo: bool) -> None:
        self._deliver = deliver
        self._original = original
        self._echo = echo
        self._pending = ""
        self._delivering = False

    def writable(self) -> bool:
        return True

    def write(self, text: str) -> int:
        if self._delivering:
            self._original.write(text)
            return len(text)

        if self._echo:
            self._original.write(text)
        self._pending += text
        *lines, self._pending = self._pending.split("\n")
        for line in lines:
            self._emit(line)
        return len(text)

    def _emit(self, line: str) -> None:
        self._delivering = True
        try:
            self._deliver(line.rstrip("\r"))
        finally:
            self._delivering = False

    def flush(self) -> None:
        self._original.flush()

    def drain(self) -> None:
        """Deliver a trailing line that never got its newline."""
        if self._pending:
            line, self._pending = self._pending, ""
            self._emit(line)


class OutputCapture:
    """Intercept stdout for the duration of a ``with`` block.

    Handlers registered with :meth:`on_line` receive each complete line. The
    original stdout is restored on every exit path, including when the
    block raises.

    Example:
        capture = OutputCapture()
        capture.on_line(aggregator.record)
        with capture:
            run_script()
    """

    def __init__(self, echo: bool = True) -> None:
        self.echo = echo
        self._handlers: list[LineHandler] = []
        self._tee: _LineTee | None = None
        self._redirect: redirect_stdout | None = None

    def on_line(self, handler: LineHandler) -> None:
        self._handlers.append(handler)

    def _deliver(self, line: str) -> None:
        for handler in self._handlers:
            handler(line)

    def __enter__(self) -> OutputCapture:
        if self._redirect is not None:
            raise RuntimeError("OutputCapture is already active")
        self._tee = _LineTee(self._deliver, sys.stdout, self.echo)
        self._redirect = redirect_stdout(self._tee)
        self._redirect.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        redirect, tee = self._redirect, self._tee
        self._redirect = None
        self._tee = None
        try:
            if tee is not None:
                tee.drain()
        finally:
            if redirect is not None:
                redirect.__exit__(exc_type, exc, tb)
