"""
Command-line entry point.

    flare out [--file flare.file] [--output out.tar.gz]

A missing script file is not fatal: the embedded default script is used
instead, with a warning.
"""

import logging
from typing import Optional

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from flare.config import EnvConfigProvider, RunConfig
from flare.errors import FlareError, ScriptParseError
from flare.logging_config import configure_logging
from flare.modules.builtins import default_registry
from flare.modules.engine import ExecutionEngine, ExecutionResult, default_script_body
from flare.modules.script import parse

logger = logging.getLogger("flare.cli")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def load_script_source(file_path: str, config: RunConfig) -> str:
    """Read the script file, falling back to the embedded default script."""
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        logger.warning(f"Unable to find {file_path}, using sensible defaults")
        return default_script_body(config.default_kubeconfig)
    except UnicodeDecodeError:
        raise ScriptParseError(f"{file_path}: script is not valid UTF-8") from None
    except OSError as e:
        raise click.ClickException(f"cannot read {file_path}: {e}")


def run_out(file_path: str, output: str, config: RunConfig) -> ExecutionResult:
    """Parse and execute a flare.file, writing the archive to output."""
    source = load_script_source(file_path, config)
    script = parse(source)
    engine = ExecutionEngine(script, registry=default_registry(config.command_timeout))
    return engine.execute(output)


def _summary(result: ExecutionResult) -> Table:
    table = Table(title="flare run")
    table.add_column("#", justify="right")
    table.add_column("Line", justify="right")
    table.add_column("Directive")
    for step in result.steps:
        table.add_row(str(step.index), str(step.position), step.name)
    return table


@click.group()
@click.option(
    "--log-level",
    "log_level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level (default: $LOG_LEVEL or INFO)",
)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]):
    """Collect Kubernetes diagnostics described by a flare.file."""
    load_dotenv()
    try:
        config = EnvConfigProvider().get_run_config()
    except ValueError as e:
        raise click.ClickException(str(e))
    try:
        configure_logging(log_level or config.log_level)
    except ValueError:
        raise click.ClickException(
            f"invalid log level {log_level or config.log_level!r}, use one of {', '.join(LOG_LEVELS)}"
        )
    ctx.obj = config


@cli.command("out", short_help="outputs an archive from collected data")
@click.option("--file", "file_path", default=None, help="the path to the flare.file (default ./flare.file)")
@click.option("--output", "output", default=None, help="the path to the generated archive file (default out.tar.gz)")
@click.pass_obj
def out(config: RunConfig, file_path: Optional[str], output: Optional[str]):
    """outputs an archive from data collected from the specified machine"""
    file_path = file_path or config.file
    output = output or config.output
    try:
        result = run_out(file_path, output, config)
    except FlareError as e:
        raise click.ClickException(str(e))
    except OSError as e:
        raise click.ClickException(f"cannot write archive {output}: {e}")

    console = Console()
    console.print(_summary(result))
    console.print(f"Archive written to [bold]{result.archive_path}[/bold]")


def main():
    cli()


if __name__ == "__main__":
    main()
