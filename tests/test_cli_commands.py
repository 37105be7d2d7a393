"""Tests for CLI commands."""

import json
import sys
from pathlib import Path

from click.testing import CliRunner

from sunctally.cli import main


def test_classify_lines() -> None:
    runner = CliRunner()

    result = runner.invoke(main, ["classify", "checkcaller passed", "Getting ready to run tests..."])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0] == "pass\tcheckcaller\tcheckcaller passed"
    assert lines[1] == "info\t-\tGetting ready to run tests..."


def test_classify_requires_input() -> None:
    runner = CliRunner()

    result = runner.invoke(main, ["classify"])

    assert result.exit_code != 0
    assert "Provide LINES or --file" in result.output


def test_replay_prints_log_and_summary(transcript_file: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(main, ["replay", str(transcript_file)])

    assert result.exit_code == 0, result.output
    assert "getgenv passed" in result.output
    assert "Passed:  2" in result.output
    assert "Failed:  2" in result.output
    assert "Timeout: 1" in result.output
    assert "Progress: 100% (5/5)" in result.output


def test_replay_filter(transcript_file: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(main, ["replay", str(transcript_file), "--filter", "HOOKFUNCTION"])

    assert result.exit_code == 0, result.output
    log_lines = [line for line in result.output.splitlines() if line.startswith("[")]
    assert len(log_lines) == 1
    assert "hookfunction failed" in log_lines[0]


def test_replay_json(transcript_file: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(main, ["replay", str(transcript_file), "--json"])

    assert result.exit_code == 0, result.output
    summary = json.loads(result.stdout)
    assert summary["counted"] == 5
    assert summary["percentage"] == 100
    assert summary["status"] == "completed"


def test_replay_empty_transcript_falls_back(tmp_path: Path) -> None:
    runner = CliRunner()
    transcript = tmp_path / "empty.txt"
    transcript.write_text("Getting ready to run tests...\n", encoding="utf-8")

    result = runner.invoke(main, ["replay", str(transcript), "--json"])

    assert result.exit_code == 0, result.output
    summary = json.loads(result.stdout)
    assert summary["progress"] == "90/90"
    assert summary["percentage"] == 100


def test_run_script_harness(tmp_path: Path) -> None:
    runner = CliRunner()
    script = tmp_path / "harness.py"
    script.write_text(
        "print('✅ getgenv passed')\nprint('❌ getrenv failed')\n",
        encoding="utf-8",
    )
    output = tmp_path / "out" / "results.json"

    result = runner.invoke(
        main,
        [
            "run",
            "--script",
            str(script),
            "--wait",
            "0",
            "--load-delay",
            "0",
            "--json-output",
            str(output),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Progress: 100% (2/2)" in result.output
    payload = json.loads(output.read_text())
    assert payload["summary"]["passed"] == 1
    assert payload["summary"]["failed"] == 1
    assert len(payload["session"]["log"]) == 6


def test_run_command_failure_still_completes(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        main,
        [
            "run",
            "--command",
            f"{sys.executable} -c 'import sys; sys.exit(4)'",
            "--wait",
            "0",
            "--load-delay",
            "0",
            "--quiet",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Harness error: Command exited with code 4" in result.output
    assert "Progress: 100% (90/90)" in result.output


def test_run_requires_one_harness() -> None:
    runner = CliRunner()

    result = runner.invoke(main, ["run", "--wait", "0"])

    assert result.exit_code != 0
    assert "--command or --script" in result.output


def test_functions_lists_registry(tmp_path: Path) -> None:
    runner = CliRunner()
    registry_file = tmp_path / "functions.yaml"
    registry_file.write_text("- getgenv\n- syn_getgenv\n")

    result = runner.invoke(main, ["--registry", str(registry_file), "functions"])

    assert result.exit_code == 0, result.output
    assert result.output.splitlines()[:2] == ["syn_getgenv", "getgenv"]
    assert "2 functions" in result.output


def test_invalid_registry_file(tmp_path: Path) -> None:
    runner = CliRunner()
    registry_file = tmp_path / "functions.yaml"
    registry_file.write_text("[]\n")

    result = runner.invoke(main, ["--registry", str(registry_file), "functions"])

    assert result.exit_code != 0
