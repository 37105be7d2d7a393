"""Tests for scoped stdout capture."""

import sys

import pytest

from sunctally.harness.capture import OutputCapture


class TestOutputCapture:
    """Test line interception and sink restoration."""

    def test_delivers_complete_lines(self):
        """Should deliver each printed line to the handler."""
        lines = []
        capture = OutputCapture(echo=False)
        capture.on_line(lines.append)

        with capture:
            print("✅ getgenv passed")
            print("❌ getrenv", "failed")

        assert lines == ["✅ getgenv passed", "❌ getrenv failed"]

    def test_joins_partial_writes(self):
        """Should join writes until a newline arrives."""
        lines = []
        capture = OutputCapture(echo=False)
        capture.on_line(lines.append)

        with capture:
            sys.stdout.write("check")
            sys.stdout.write("caller passed\nnext")

        assert lines == ["checkcaller passed", "next"]

    def test_restores_stdout(self):
        """Should restore the original stdout after the block."""
        original = sys.stdout
        with OutputCapture(echo=False):
            assert sys.stdout is not original
        assert sys.stdout is original

    def test_restores_stdout_on_error(self):
        """Should restore stdout when the block raises."""
        original = sys.stdout
        lines = []
        capture = OutputCapture(echo=False)
        capture.on_line(lines.append)

        with pytest.raises(RuntimeError):
            with capture:
                print("getgc passed")
                raise RuntimeError("harness crashed")

        assert sys.stdout is original
        assert lines == ["getgc passed"]

    def test_echo_passes_output_through(self, capsys):
        """Should still write to the original stdout when echoing."""
        lines = []
        capture = OutputCapture(echo=True)
        capture.on_line(lines.append)

        with capture:
            print("hello")

        assert capsys.readouterr().out == "hello\n"
        assert lines == ["hello"]

    def test_not_reentrant(self):
        """Should refuse to be entered twice."""
        capture = OutputCapture(echo=False)
        with capture:
            with pytest.raises(RuntimeError):
                capture.__enter__()

    def test_handler_output_not_fed_back(self, capsys):
        """Should pass text printed by a handler through instead of re-delivering it."""
        lines = []
        capture = OutputCapture(echo=False)

        def noisy(line):
            lines.append(line)
            print(f"handled {line}")

        capture.on_line(noisy)
        with capture:
            print("getgc passed")

        assert lines == ["getgc passed"]
        assert capsys.readouterr().out == "handled getgc passed\n"
