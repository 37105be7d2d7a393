"""CLI entrypoint for sunctally."""

from __future__ import annotations

import json
from pathlib import Path

import click
from pydantic import ValidationError

from .config import TallySettings
from .exceptions import RegistryError
from .harness import build_harness
from .logging_config import configure_logging
from .registry import FunctionRegistry
from .runner import RunPolicy, RunResult, replay_lines, run_harness
from .schemas.events import LogAppended, LogEntry, ProgressChanged, TallyEvent, Verdict
from .watcher.classifier import classify_message
from .watcher.session import SessionAggregator

VERDICT_GLYPHS = {
    Verdict.PASS: "✅",
    Verdict.FAIL: "❌",
    Verdict.NEUTRAL: "❕",
    Verdict.INFO: "ℹ️",
}


def _format_entry(entry: LogEntry) -> str:
    return f"[{entry.clock}] {VERDICT_GLYPHS[entry.verdict]} {entry.display_text}"


def _load_settings() -> TallySettings:
    try:
        return TallySettings()
    except ValidationError as e:
        raise click.UsageError(f"Invalid configuration: {e}") from e


def _load_registry(path: Path | None) -> FunctionRegistry:
    if path is None:
        return FunctionRegistry.default()
    try:
        return FunctionRegistry.from_yaml(path)
    except RegistryError as e:
        raise click.BadParameter(str(e), param_hint="--registry") from e


def _echo_summary(result: RunResult, aggregator: SessionAggregator) -> None:
    summary = aggregator.summary()
    click.echo("")
    click.echo(f"Passed:  {summary['passed']}")
    click.echo(f"Timeout: {summary['timeout']}")
    click.echo(f"Failed:  {summary['failed']}")
    click.echo(f"Progress: {result.progress.percentage}% ({result.progress.label})")
    click.echo(f"Elapsed: {summary['elapsed_sec']}s")


def _write_json(aggregator: SessionAggregator, output: Path) -> None:
    payload = {
        "summary": aggregator.summary(),
        "session": aggregator.get_session().model_dump(mode="json"),
    }
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(payload, indent=2, ensure_ascii=False))


@click.group()
@click.version_option(package_name="sunctally")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level (default from SUNCTALLY_LOG__LEVEL)",
)
@click.option("--log-json", is_flag=True, default=False, help="Render logs as JSON")
@click.option(
    "--registry",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML list of function names replacing the built-in registry",
)
@click.pass_context
def main(
    ctx: click.Context,
    log_level: str | None,
    log_json: bool,
    registry: Path | None,
) -> None:
    """Tally per-function verdicts from compatibility harness output."""
    config = _load_settings()
    configure_logging(
        level=log_level or config.log.level,
        json_output=log_json or config.log.json_output,
    )
    ctx.ensure_object(dict)
    ctx.obj["settings"] = config
    ctx.obj["registry"] = _load_registry(registry or config.registry_file)


@main.command()
@click.option("--command", "-c", type=str, default=None, help="Harness command to execute")
@click.option(
    "--script",
    "-s",
    type=click.Path(path_type=Path),
    default=None,
    help="Python harness script to execute in-process",
)
@click.option("--total", type=click.IntRange(min=1), default=None, help="Expected result count")
@click.option(
    "--wait",
    type=click.FloatRange(min=0),
    default=None,
    help="Seconds to wait after the harness returns before completing",
)
@click.option(
    "--load-delay",
    type=click.FloatRange(min=0),
    default=None,
    help="Seconds to wait before launching the harness",
)
@click.option("--timeout", type=click.IntRange(min=1), default=None, help="Command timeout")
@click.option(
    "--json-output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write summary and session log as JSON",
)
@click.option("--quiet", "-q", is_flag=True, default=False, help="Only print the summary")
@click.pass_context
def run(
    ctx: click.Context,
    command: str | None,
    script: Path | None,
    total: int | None,
    wait: float | None,
    load_delay: float | None,
    timeout: int | None,
    json_output: Path | None,
    quiet: bool,
) -> None:
    """Run a harness and tally its results live."""
    config: TallySettings = ctx.obj["settings"]
    try:
        harness = build_harness(command=command, script=script, timeout_sec=timeout)
    except ValueError as e:
        raise click.UsageError(f"{e} (use --command or --script)") from e

    defaults = RunPolicy.from_settings(config.run)
    policy = RunPolicy(
        load_delay_sec=defaults.load_delay_sec if load_delay is None else load_delay,
        completion_wait_sec=defaults.completion_wait_sec if wait is None else wait,
    )

    aggregator = SessionAggregator(
        registry=ctx.obj["registry"],
        total_expected=config.run.total_expected,
    )

    def on_event(event: TallyEvent) -> None:
        if isinstance(event, LogAppended) and not quiet:
            click.echo(_format_entry(event.entry))
        elif isinstance(event, ProgressChanged) and not quiet and aggregator.session.active:
            click.echo(f"    progress {event.percentage}% ({event.current}/{event.total})")

    aggregator.subscribe(on_event)

    click.echo(f"Running {harness.describe()}")
    result = run_harness(harness, aggregator, policy=policy, total_expected=total)

    click.echo("🏁 SUNC test completed!")
    _echo_summary(result, aggregator)
    if result.harness_error:
        click.echo(f"Harness error: {result.harness_error}")

    if json_output:
        _write_json(aggregator, json_output)
        click.echo(f"Results saved to {json_output}")


@main.command()
@click.argument("transcript", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--total", type=click.IntRange(min=1), default=None, help="Expected result count")
@click.option("--filter", "term", type=str, default=None, help="Show log lines containing TERM")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print summary as JSON")
@click.pass_context
def replay(
    ctx: click.Context,
    transcript: Path,
    total: int | None,
    term: str | None,
    as_json: bool,
) -> None:
    """Tally a saved harness transcript."""
    config: TallySettings = ctx.obj["settings"]
    lines = transcript.read_text(encoding="utf-8").splitlines()

    aggregator = SessionAggregator(
        registry=ctx.obj["registry"],
        total_expected=config.run.total_expected,
    )
    result = replay_lines(lines, aggregator, total_expected=total)

    if as_json:
        click.echo(json.dumps(aggregator.summary(), indent=2))
        return

    entries = aggregator.filter_log(term) if term else list(aggregator.session.log)
    for entry in entries:
        click.echo(_format_entry(entry))
    _echo_summary(result, aggregator)


@main.command()
@click.argument("lines", nargs=-1)
@click.option(
    "--file",
    "-f",
    "source",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read lines from a file",
)
@click.pass_context
def classify(ctx: click.Context, lines: tuple[str, ...], source: Path | None) -> None:
    """Classify lines without tallying them."""
    registry: FunctionRegistry = ctx.obj["registry"]
    messages = list(lines)
    if source is not None:
        messages.extend(source.read_text(encoding="utf-8").splitlines())
    if not messages:
        raise click.UsageError("Provide LINES or --file")

    for message in messages:
        result = classify_message(message, registry)
        name = result.function_name or "-"
        click.echo(f"{result.verdict.value}\t{name}\t{message}")


@main.command()
@click.pass_context
def functions(ctx: click.Context) -> None:
    """List known functions in match order."""
    registry: FunctionRegistry = ctx.obj["registry"]
    for name in registry:
        click.echo(name)
    click.echo(f"\n{len(registry)} functions")
