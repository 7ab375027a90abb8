# src/pymstest/cli/config_cmds.py

from pathlib import Path

import click
import structlog
from rich.pretty import pretty_repr

from pymstest.cli.utils import logging_options, setup_logging_from_context
from pymstest.config import load_config
from pymstest.exceptions import ConfigurationError
from pymstest.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.config")


@click.group(name="config")
def config_cli():
    """Commands for inspecting and validating configuration."""
    pass


@config_cli.command(name="show")
@click.option(
    "-c",
    "--config-path",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path),
    default=Path("pymstest.toml"),
    show_default=True,
    envvar="PYMSTEST_CONF",
    help="Path to the pymstest configuration file (env var PYMSTEST_CONF).",
    show_envvar=True,
)
@logging_options
@click.pass_context
def show_config(ctx: click.Context, config_path: Path, **kwargs):
    """Load, validate, and display the configuration."""
    setup_logging_from_context(
        ctx,
        local_log_level=kwargs.get("log_level"),
        local_log_file=kwargs.get("log_file"),
        local_json_logs=kwargs.get("json_logs"),
    )
    log.info("Executing 'config show' command", config_path=str(config_path))

    try:
        config = load_config(config_path)
        click.echo(pretty_repr(config, expand_all=True))

        if not (config.run.container or config.run.metadata):
            log.warning("No test container or metadata configured; 'run' will need --container or --metadata.")

    except ConfigurationError as e:
        log.error("Failed to load or validate configuration", error=str(e))
        click.echo(f"Error: Configuration problem in '{config_path}':\n{e}", err=True)
        ctx.exit(1)

# 🔼⚙️
