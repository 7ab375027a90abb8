# src/pymstest/cli/run_cmds.py

import asyncio
from pathlib import Path

import attrs
import click
import structlog

from pymstest.cli.render import ResultPrinter
from pymstest.cli.utils import logging_options, setup_logging_from_context
from pymstest.config import PyMSTestConfig, RunConfig, load_config
from pymstest.exceptions import ConfigurationError, RunnerLaunchError
from pymstest.parsing import CallbackSink, DoneEvent, ParserEvent, ResultParser
from pymstest.parsing.buffer import DEFAULT_TERMINATOR
from pymstest.runner import KNOWN_DETAILS, RunCommand, SubprocessTestRunner, TestRunResult, resolve_executable
from pymstest.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.run")

EXIT_ALL_PASSED = 0
EXIT_TESTS_FAILED = 1
EXIT_USAGE_ERROR = 2

LINE_ENDINGS = {"crlf": "\r\n", "lf": "\n"}


def _apply_overrides(run: RunConfig, **overrides) -> RunConfig:
    """Returns a copy of run with every non-empty CLI value applied."""
    changes = {k: v for k, v in overrides.items() if v is not None and v is not False and v != ()}
    for name in ("test_lists", "categories", "tests", "details"):
        if name in changes:
            changes[name] = list(changes[name])
    # Picking a source on the command line replaces whichever one the file set.
    if changes.get("container"):
        changes["metadata"] = None
    elif changes.get("metadata"):
        changes["container"] = None
    return attrs.evolve(run, **changes)


def _build_command(run: RunConfig, language: str) -> RunCommand:
    options = run.to_options()
    executable = resolve_executable(override=run.mstest_path)
    return options.to_command(executable, working_dir=run.working_dir, language=language)


def _execute(command: RunCommand, printer: ResultPrinter, timeout: float | None) -> TestRunResult:
    sink = CallbackSink(on_test=printer.on_test, on_error=printer.on_error)
    return asyncio.run(SubprocessTestRunner().run(command, sink, timeout=timeout))


def _exit_code_for(failed: int, timed_out: bool = False) -> int:
    return EXIT_TESTS_FAILED if failed or timed_out else EXIT_ALL_PASSED


@click.command(name="run")
@click.option(
    "-c",
    "--config-path",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path),
    default=None,
    envvar="PYMSTEST_CONF",
    show_envvar=True,
    help="Path to a pymstest TOML configuration file (env var PYMSTEST_CONF).",
)
@click.option("--container", default=None, help="Test assembly to run (/testcontainer).")
@click.option("--metadata", default=None, help="Test metadata file to run (/testmetadata).")
@click.option("--test-list", "test_lists", multiple=True, help="Test list from the metadata file. Repeatable.")
@click.option(
    "--category",
    "categories",
    multiple=True,
    help="Category filter token, optionally prefixed with &, |, ! or &!. Repeatable.",
)
@click.option("--test", "tests", multiple=True, help="Run only this test. Repeatable.")
@click.option("--detail", "details", multiple=True, help="Extra result property to report. Repeatable.")
@click.option("--no-isolation", is_flag=True, default=None, help="Run tests inside the mstest.exe process.")
@click.option("--test-settings", default=None, help="Test settings file.")
@click.option("--run-config", default=None, help="Run configuration file.")
@click.option("--results-file", default=None, help="Where mstest.exe writes its .trx file.")
@click.option(
    "--working-dir",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Directory to run mstest.exe from.",
)
@click.option(
    "--mstest-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    envvar="PYMSTEST_MSTEST_PATH",
    help="Explicit path to mstest.exe instead of the VS*COMNTOOLS lookup.",
)
@click.option("--language", default=None, envvar="PYMSTEST_LANGUAGE", help="Language of the mstest.exe build.")
@click.option("--timeout", type=float, default=None, help="Kill the run after this many seconds.")
@click.option("--show-details/--hide-details", default=True, help="Print result attributes.")
@logging_options
@click.pass_context
def run_cli(
    ctx: click.Context,
    config_path: Path | None,
    language: str | None,
    show_details: bool,
    log_level: str | None,
    log_file: str | None,
    json_logs: bool | None,
    **run_overrides,
):
    """Run mstest.exe and report each result as it is printed."""
    try:
        config = load_config(config_path) if config_path else PyMSTestConfig()
    except ConfigurationError as e:
        click.echo(f"Error: Configuration problem in '{config_path}':\n{e}", err=True)
        ctx.exit(EXIT_USAGE_ERROR)

    setup_logging_from_context(
        ctx,
        local_log_level=log_level or (config.global_config.log_level if config_path else None),
        local_log_file=log_file,
        local_json_logs=json_logs,
    )

    language = language or config.global_config.language
    try:
        run = _apply_overrides(config.run, **run_overrides)
        command = _build_command(run, language)
    except (ConfigurationError, ValueError) as e:
        log.error("Cannot build test command", error=str(e))
        click.echo(f"Error: {e}", err=True)
        ctx.exit(EXIT_USAGE_ERROR)

    printer = ResultPrinter(show_details=show_details)
    try:
        outcome = _execute(command, printer, run.timeout)
    except RunnerLaunchError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(EXIT_USAGE_ERROR)

    printer.print_summary(outcome.results, outcome.passed, outcome.failed)
    log.info("'run' command finished", exit_code=outcome.exit_code, failed=len(outcome.failed))
    ctx.exit(_exit_code_for(len(outcome.failed), outcome.timed_out))


@click.command(name="parse")
@click.argument(
    "output_file",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path),
)
@click.option("--language", default="en", envvar="PYMSTEST_LANGUAGE", show_default=True)
@click.option("--detail", "details", multiple=True, help="Detail name used to normalize attribute keys.")
@click.option(
    "--line-ending",
    type=click.Choice(["auto", *LINE_ENDINGS], case_sensitive=False),
    default="auto",
    show_default=True,
)
@click.option("--chunk-size", type=click.IntRange(min=1), default=4096, show_default=True)
@click.option("--show-details/--hide-details", default=True, help="Print result attributes.")
@logging_options
@click.pass_context
def parse_cli(
    ctx: click.Context,
    output_file: Path,
    language: str,
    details: tuple[str, ...],
    line_ending: str,
    chunk_size: int,
    show_details: bool,
    **kwargs,
):
    """Parse a saved mstest.exe console log."""
    setup_logging_from_context(
        ctx,
        local_log_level=kwargs.get("log_level"),
        local_log_file=kwargs.get("log_file"),
        local_json_logs=kwargs.get("json_logs"),
    )

    data = output_file.read_bytes()
    if line_ending == "auto":
        terminator = DEFAULT_TERMINATOR if b"\r\n" in data else "\n"
    else:
        terminator = LINE_ENDINGS[line_ending.lower()]

    printer = ResultPrinter(show_details=show_details)
    printer_sink = CallbackSink(on_test=printer.on_test, on_error=printer.on_error)
    done: list[DoneEvent] = []

    def sink(event: ParserEvent) -> None:
        if isinstance(event, DoneEvent):
            done.append(event)
        printer_sink(event)

    parser = ResultParser(sink, details=details + KNOWN_DETAILS, language=language, terminator=terminator)
    log.debug("Parsing saved output", path=str(output_file), size=len(data), chunk_size=chunk_size)
    for start in range(0, len(data), chunk_size):
        parser.feed(data[start : start + chunk_size])
    parser.close()

    summary = done[0]
    printer.print_summary(summary.results, summary.passed, summary.failed)
    log.info("'parse' command finished", results=len(summary.results))
    ctx.exit(_exit_code_for(len(summary.failed)))

# 🔼⚙️
