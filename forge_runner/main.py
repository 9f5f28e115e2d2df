"""
forge-runner — CLI entrypoint.

Usage:
    python -m forge_runner.main --help
    python -m forge_runner.main forge-test
    python -m forge_runner.main forge-install
    python -m forge_runner.main config show
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from forge_runner import __version__
from forge_runner.core.observability.logging_config import resolve_level, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="forge-runner")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to project.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Forge runner — install a pinned forge and run its tests."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(
            debug=debug,
            verbose=verbose,
            quiet=quiet,
            env_level=os.environ.get("FORGE_LOG_LEVEL"),
        ),
        log_file=os.environ.get("FORGE_LOG_FILE"),
        log_file_level=os.environ.get("FORGE_LOG_FILE_LEVEL"),
    )


@cli.group()
def config() -> None:
    """Forge configuration commands."""


@config.command("show")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_show(ctx: click.Context, as_json: bool) -> None:
    """Show the resolved forge settings."""
    from forge_runner.core.config.loader import ConfigError, find_config_file, load_config

    config_path: Path | None = ctx.obj.get("config_path")
    try:
        resolved = load_config(config_path)
    except ConfigError as e:
        if as_json:
            click.echo(json.dumps({"error": str(e)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    source = config_path or find_config_file()

    if as_json:
        data = resolved.model_dump()
        data["source"] = str(source) if source else None
        click.echo(json.dumps(data, indent=2))
        return

    click.secho("\n⚙️  Forge configuration", fg="cyan", bold=True)
    click.echo(f"   Version:   {resolved.version}")
    click.echo(f"   Verbosity: {resolved.verbosity}")
    if source:
        click.echo(f"   Source:    {source}")
    else:
        click.secho("   Source:    (defaults)", fg="yellow")
    click.echo()


# ── Register forge commands from forge_runner/ui/cli/ ─────────────

from forge_runner.ui.cli.forge import forge_install, forge_test, status  # noqa: E402

cli.add_command(forge_test)
cli.add_command(forge_install)
cli.add_command(status)


if __name__ == "__main__":
    cli()
