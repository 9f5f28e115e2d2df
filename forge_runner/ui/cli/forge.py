"""
CLI commands for the forge toolchain.

Thin wrappers over ``forge_runner.core.services.forge``.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click

from forge_runner.adapters.base import Runner
from forge_runner.core.models.config import ToolConfig


def _resolve(
    ctx: click.Context,
    version: str | None = None,
    verbosity: int | None = None,
) -> tuple[ToolConfig, Path]:
    """Load config, apply flag overrides, and find the project root."""
    from forge_runner.core.config.loader import (
        ConfigError,
        find_config_file,
        load_config,
        project_root,
        with_overrides,
    )

    config_path: Path | None = ctx.obj.get("config_path")
    try:
        config = with_overrides(load_config(config_path), version, verbosity)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    root = project_root(config_path or find_config_file())
    return config, root


def _runner(mock: bool, echo: bool = True) -> Runner:
    if mock:
        from forge_runner.adapters.mock import MockProcessRunner

        return MockProcessRunner(echo=echo)

    from forge_runner.adapters.shell.process import ProcessRunner

    return ProcessRunner()


@click.command("forge-test")
@click.option("--rev", "version", default=None, help="Override the configured forge revision.")
@click.option(
    "--verbosity",
    type=click.IntRange(min=0),
    default=None,
    help="Override the configured forge verbosity.",
)
@click.option("--strict", is_flag=True, help="Exit non-zero if clean or test fails.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output the run report as JSON.")
@click.option("--mock", is_flag=True, help="Use mock runner (no real execution).")
@click.pass_context
def forge_test(
    ctx: click.Context,
    version: str | None,
    verbosity: int | None,
    strict: bool,
    as_json: bool,
    mock: bool,
) -> None:
    """Run forge test. Also installs forge if missing."""
    from forge_runner.core.services.forge.version_probe import QueryError
    from forge_runner.core.services.forge.workflow import ensure_and_test

    config, root = _resolve(ctx, version, verbosity)

    try:
        report = asyncio.run(
            ensure_and_test(config, _runner(mock, echo=not as_json), cwd=str(root))
        )
    except QueryError as e:
        if as_json:
            click.echo(json.dumps({"error": str(e)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        if strict and not report.ok:
            sys.exit(1)
        return

    quiet = ctx.obj.get("quiet", False)

    if report.install_attempted and report.install_ok is False and not quiet:
        click.secho(
            f"⚠️  Could not install forge (version={config.version}); "
            "ran with the forge on PATH",
            fg="yellow",
        )

    if report.ok:
        if not quiet:
            click.secho("✅ forge test completed", fg="green")
        return

    exit_label = f" (exit {report.exit_code})" if report.exit_code is not None else ""
    click.secho(
        f"⚠️  forge test stopped at '{report.failed_step}'{exit_label}",
        fg="red" if strict else "yellow",
    )
    if strict:
        sys.exit(1)


@click.command("forge-install")
@click.option("--rev", "version", default=None, help="Override the configured forge revision.")
@click.option("--strict", is_flag=True, help="Exit non-zero if the install fails.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output the install report as JSON.")
@click.option("--mock", is_flag=True, help="Use mock runner (no real execution).")
@click.pass_context
def forge_install(
    ctx: click.Context,
    version: str | None,
    strict: bool,
    as_json: bool,
    mock: bool,
) -> None:
    """Force installation of the configured forge version."""
    from forge_runner.core.services.forge.workflow import force_install

    config, root = _resolve(ctx, version)
    quiet = ctx.obj.get("quiet", False)

    if not quiet and not as_json:
        click.secho(f"🔨 Force installing forge (version={config.version})", fg="cyan")

    report = asyncio.run(
        force_install(config, _runner(mock, echo=not as_json), cwd=str(root))
    )

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        if strict and not report.ok:
            sys.exit(1)
        return

    if report.ok:
        if not quiet:
            click.secho(f"✅ Force installed forge (version={config.version})", fg="green")
        return

    click.secho(
        f"❌ An error occurred while installing forge (version={config.version}): "
        f"{report.error}",
        fg="red",
    )
    if strict:
        sys.exit(1)


@click.command("status")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--mock", is_flag=True, help="Use mock runner (no real execution).")
@click.pass_context
def status(ctx: click.Context, as_json: bool, mock: bool) -> None:
    """Show configured and installed forge revisions."""
    from forge_runner.core.services.forge.version_probe import QueryError, forge_status

    config, root = _resolve(ctx)

    try:
        result = asyncio.run(forge_status(config.version, _runner(mock), cwd=str(root)))
    except QueryError as e:
        if as_json:
            click.echo(json.dumps({"error": str(e)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result, indent=2))
        return

    click.secho("\n🔧 Forge", fg="cyan", bold=True)
    click.echo(f"   Configured: {result['configured']}")
    if result["installed"]:
        click.echo(f"   Installed:  {result['installed']}")
    else:
        click.secho("   Installed:  (none)", fg="yellow")

    if result["up_to_date"]:
        click.secho("   ✓ configured revision is installed", fg="green")
    else:
        click.secho("   ✗ configured revision is not installed", fg="red")
        click.echo("     Install it: forge-runner forge-install")

    if result["binaries"]:
        click.echo()
        click.secho("   Foundry binaries:", fg="white", bold=True)
        for binary in result["binaries"]:
            click.echo(f"     • {binary['name']}  → {binary['revision_or_path']}")

    click.echo()
