# src/pcapmetrics/cli.py
"""pcapmetrics Command Line Interface.

Entry point for the pcapmetrics CLI tool. Metrics go to stdout (console
sink); logs, summaries and errors go to stderr.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from pcapmetrics import __version__
from pcapmetrics.contracts.errors import PCAPConfigError, SinkConfigError, TempDirError
from pcapmetrics.core.config import DESCRIPTION, PCAPSettings, load_settings, render_sample_config

if TYPE_CHECKING:
    from pcapmetrics.plugins.manager import SinkManager

__all__ = [
    "app",
]

# Module-level singleton for sink manager
_sink_manager_cache: SinkManager | None = None


def _get_sink_manager() -> SinkManager:
    """Get initialized sink manager (singleton)."""
    global _sink_manager_cache

    from pcapmetrics.plugins.manager import SinkManager

    if _sink_manager_cache is None:
        manager = SinkManager()
        manager.register_builtin_plugins()
        _sink_manager_cache = manager
    return _sink_manager_cache


app = typer.Typer(
    name="pcapmetrics",
    help=DESCRIPTION,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"pcapmetrics version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # existence is checked in _load_dotenv for a clearer message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """Process PCAP files with tshark and emit metrics."""
    from pcapmetrics.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "INFO"
    configure_logging(json_output=json_logs, level=log_level)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _format_validation_error(
    title: str,
    message: str,
    hint: str | None = None,
    details: list[str] | None = None,
) -> None:
    """Display a formatted validation error with optional hint and details."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    console = Console(stderr=True)

    content = Text()
    content.append(message, style="white")

    if details:
        content.append("\n\n")
        for detail in details:
            content.append(f"  • {detail}\n", style="dim")

    if hint:
        content.append("\n")
        content.append("Hint: ", style="yellow bold")
        content.append(hint, style="yellow")

    panel = Panel(
        content,
        title=f"[red bold]{title}[/]",
        border_style="red",
        padding=(0, 1),
    )
    console.print(panel)


def _load_or_exit(settings: str) -> PCAPSettings:
    """Load settings, rendering any failure and exiting with status 1."""
    settings_path = Path(settings).expanduser()

    try:
        return load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        _format_validation_error(
            title="YAML Syntax Error",
            message=f"Failed to parse {settings_path.name}",
            details=[str(e.problem)] if hasattr(e, "problem") else None,
            hint="Check for unclosed brackets, incorrect indentation, or invalid characters.",
        )
        raise typer.Exit(1) from None
    except FileNotFoundError:
        _format_validation_error(
            title="File Not Found",
            message=f"Settings file does not exist: {settings}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(1) from None
    except ValidationError as e:
        details = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            details.append(f"{loc}: {error['msg']}" if loc else str(error["msg"]))
        _format_validation_error(
            title="Configuration Validation Failed",
            message=f"Invalid settings in {settings_path.name}",
            details=details,
            hint="Run `pcapmetrics sample-config` for a commented example.",
        )
        raise typer.Exit(1) from None


@app.command()
def gather(
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    sink_name: str = typer.Option(
        "console",
        "--sink",
        help="Sink receiving the metrics (see `pcapmetrics sinks`).",
    ),
    output_format: str = typer.Option(
        "line",
        "--format",
        "-f",
        help="Console sink format: 'line' (line protocol) or 'json' (JSON lines).",
    ),
    output: str = typer.Option(
        "stdout",
        "--output",
        "-o",
        help="Console sink stream.",
    ),
) -> None:
    """Run one gather pass over the configured capture files."""
    from pcapmetrics.engine.processor import CaptureProcessor

    config = _load_or_exit(settings)

    sink_options: dict[str, Any] = {"format": output_format, "output": output} if sink_name == "console" else {}
    try:
        sink = _get_sink_manager().create_sink(sink_name, sink_options)
    except SinkConfigError as e:
        _format_validation_error(
            title="Sink Configuration Error",
            message=str(e),
            hint="Run `pcapmetrics sinks` to list available sinks.",
        )
        raise typer.Exit(1) from None

    try:
        summary = CaptureProcessor(config).gather(sink)
    except (PCAPConfigError, TempDirError) as e:
        _format_validation_error(title="Cannot Start Gather Pass", message=str(e))
        raise typer.Exit(1) from None
    finally:
        sink.close()

    typer.echo(
        f"Processed {summary.files_processed} file(s), skipped {summary.files_skipped}, "
        f"emitted {summary.events_emitted} metric(s), {summary.diagnostics} diagnostic(s).",
        err=True,
    )


@app.command()
def validate(
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """Validate settings without touching any capture file."""
    config = _load_or_exit(settings)
    schema = config.build_schema()

    typer.echo("Configuration valid!")
    typer.echo(f"  Files: {len(config.files)}")
    typer.echo(f"  Tool: {config.tshark_path or '(not configured)'}")
    typer.echo(f"  Measurement: {schema.measurement}")
    typer.echo("  Columns:")
    for index, column in enumerate(schema.columns):
        role = "tag" if schema.is_tag_at(index) else schema.type_at(index).value
        if index == schema.timestamp_index and not schema.is_tag_at(index):
            role = f"timestamp ({schema.timestamp_format})"
        typer.echo(f"    {column:20} {role}")
    typer.echo(f"  Processing directory: {config.resolved_tmp_dir()}")

    if not config.tshark_path:
        typer.secho("Warning: tshark_path is empty; gather will refuse to run.", fg=typer.colors.YELLOW, err=True)


@app.command("sample-config")
def sample_config() -> None:
    """Print a commented sample configuration."""
    typer.echo(render_sample_config(), nl=False)


@app.command()
def sinks() -> None:
    """List available sinks."""
    manager = _get_sink_manager()
    typer.echo("SINKS:")
    for cls in manager.get_sinks():
        doc = (cls.__doc__ or "").strip().splitlines()
        description = doc[0] if doc else "(no description)"
        typer.echo(f"  {cls.name:20} - {description}")
