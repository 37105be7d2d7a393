"""Harness adapter that runs an external command."""

from __future__ import annotations

import shlex
import subprocess
import threading
from collections.abc import Sequence
from pathlib import Path

import structlog

from ..config import settings
from ..exceptions import HarnessError
from .base import Harness
from .capture import LineHandler

logger = structlog.get_logger(__name__)


class CommandHarness(Harness):
    """Streams merged stdout/stderr of a subprocess line by line."""

    name = "command"

    def __init__(
        self,
        command: Sequence[str] | str,
        timeout_sec: int | None = None,
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        args = shlex.split(command) if isinstance(command, str) else list(command)
        if not args:
            raise ValueError("command must not be empty")
        self.command = args
        self.timeout_sec = timeout_sec or settings.run.command_timeout_sec
        self.cwd = cwd
        self.env = env

    def describe(self) -> str:
        return shlex.join(self.command)

    def run(self, on_line: LineHandler) -> None:
        try:
            process = subprocess.Popen(
                self.command,
                cwd=self.cwd,
                env=self.env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except FileNotFoundError as e:
            raise HarnessError(f"Command not found: {self.command[0]}") from e
        except OSError as e:
            raise HarnessError(f"Failed to start {self.command[0]}: {e}") from e

        timed_out = threading.Event()

        def _kill() -> None:
            timed_out.set()
            process.kill()

        watchdog = threading.Timer(self.timeout_sec, _kill)
        watchdog.daemon = True
        watchdog.start()
        try:
            assert process.stdout is not None
            for line in process.stdout:
                on_line(line.rstrip("\r\n"))
            return_code = process.wait()
        finally:
            watchdog.cancel()
            if process.poll() is None:
                process.kill()
                process.wait()

        if timed_out.is_set():
            raise HarnessError(f"Command timed out after {self.timeout_sec} seconds")
        if return_code != 0:
            raise HarnessError(f"Command exited with code {return_code}")

        logger.debug("command_finished", command=self.describe(), return_code=return_code)
