"""
Remembrances-MCP installer: CLI entrypoint.

Usage:
    python -m remembrances_installer.main --help
    python -m remembrances_installer.main install
    python -m remembrances_installer.main detect --json
    python -m remembrances_installer.main config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from remembrances_installer import __version__
from remembrances_installer.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="remembrances-installer")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to installer.yml (default: ./installer.yml if present).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Remembrances-MCP installer: pick, fetch and set up the right build."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
        quiet_third_party=not debug,
    )


@cli.group()
def config() -> None:
    """Installer configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate installer settings (installer.yml + REMEMBRANCES_* env)."""
    from remembrances_installer.core.config.loader import ConfigError, load_settings

    try:
        settings = load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        if as_json:
            click.echo(json.dumps({"valid": False, "error": str(e)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({"valid": True, "settings": settings.model_dump(mode="json")}, indent=2))
        return

    click.secho("✅ Configuration is valid", fg="green", bold=True)
    for key, value in settings.model_dump(mode="json").items():
        click.echo(f"   {key:<16} {value}")
    click.echo()


from remembrances_installer.ui.cli.install import detect, install, validate  # noqa: E402

cli.add_command(install)
cli.add_command(detect)
cli.add_command(validate)


if __name__ == "__main__":
    cli()
