# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""CLI entrypoint for the memory allocation simulator.

Usage:
    python -m memalloc.entrypoints.cli run requests.txt
    python -m memalloc.entrypoints.cli run scenario.yaml --format json
"""

from enum import Enum
from pathlib import Path

import structlog
import typer
from pydantic import ValidationError

from memalloc import __version__
from memalloc.adapters.config.logging import bind_run_context, configure_logging
from memalloc.adapters.config.scenario_loader import is_scenario_file, load_scenario
from memalloc.adapters.config.settings import Settings, get_settings
from memalloc.adapters.inbound.request_parser import load_requests
from memalloc.adapters.outbound.report_renderer import render_json, render_text
from memalloc.application.simulation import SimulationService
from memalloc.domain.errors import MemallocError

app = typer.Typer(
    name="memalloc",
    help="First-fit contiguous memory allocation simulator",
    add_completion=False,
)


class OutputFormat(str, Enum):
    text = "text"
    json = "json"


def _load_settings() -> Settings:
    """Settings from the environment; invalid values end the command with exit 1."""
    try:
        return get_settings()
    except ValidationError as e:
        typer.echo(f"Error: invalid configuration: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def run(
    input_file: Path = typer.Argument(
        ...,
        help="Request file (first line: total memory) or YAML scenario",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.text,
        "--format",
        "-f",
        help="Report format",
    ),
    strict: bool | None = typer.Option(
        None,
        "--strict/--lenient",
        help="Abort on malformed request lines (default: from settings)",
    ),
    check_invariants: bool | None = typer.Option(
        None,
        "--check-invariants/--no-check-invariants",
        help="Verify ledger invariants after every request (default: from settings)",
    ),
    log_level: str = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level (default: from settings)",
    ),
) -> None:
    """Replay a request stream and print the final memory map and statistics.

    Example:
        $ memalloc run requests.txt
        $ memalloc run scenario.yaml --format json --check-invariants
    """
    settings = _load_settings()

    final_strict = settings.simulator.strict_parsing if strict is None else strict
    final_check = (
        settings.simulator.check_invariants if check_invariants is None else check_invariants
    )
    final_log_level = log_level or settings.logging.level

    configure_logging(final_log_level, json_output=settings.logging.json_output)
    bind_run_context(str(input_file))
    logger = structlog.get_logger(__name__)

    try:
        if is_scenario_file(input_file):
            script = load_scenario(input_file)
        else:
            script = load_requests(input_file, strict=final_strict)
        report = SimulationService(check_invariants=final_check).run_script(script)
    except (MemallocError, OSError) as e:
        logger.error("simulation_aborted", error=str(e))
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    unit = settings.simulator.unit
    if output_format is OutputFormat.json:
        typer.echo(render_json(report, unit), nl=False)
    else:
        typer.echo(render_text(report, unit, source=str(input_file)), nl=False)


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"memalloc v{__version__}")


@app.command()
def config() -> None:
    """Show current configuration."""
    settings = _load_settings()

    typer.echo("=" * 60)
    typer.echo("memalloc - Configuration")
    typer.echo("=" * 60)
    typer.echo()
    typer.echo("[Simulator]")
    typer.echo(f"  Unit: {settings.simulator.unit}")
    typer.echo(f"  Strict parsing: {settings.simulator.strict_parsing}")
    typer.echo(f"  Check invariants: {settings.simulator.check_invariants}")
    typer.echo()
    typer.echo("[Logging]")
    typer.echo(f"  Level: {settings.logging.level}")
    typer.echo(f"  JSON output: {settings.logging.json_output}")
    typer.echo("=" * 60)


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
