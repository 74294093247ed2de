"""
CLI commands for the install run and its building blocks.

Thin wrappers over ``core.services.install``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from remembrances_installer.core.config.loader import ConfigError, load_settings
from remembrances_installer.core.errors import InstallError
from remembrances_installer.core.models.settings import InstallerSettings


def _load(ctx: click.Context, **overrides: object) -> InstallerSettings:
    """Load settings or exit with the config error."""
    try:
        return load_settings(ctx.obj.get("config_path"), overrides=overrides)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


def _fail(message: str, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps({"error": message}, indent=2))
    else:
        click.secho(f"✗ {message}", fg="red")
    sys.exit(1)


def _kv(label: str, value: object) -> None:
    click.echo("  " + click.style(f"{label:<22}", fg="blue") + f" {value}")


# ── Install ─────────────────────────────────────────────────────


@click.command()
@click.option("--version", "version_tag", default=None, help="Release tag to install (default: latest).")
@click.option("--nvidia/--no-nvidia", default=None, help="Force the NVIDIA/CUDA or CPU build (Linux).")
@click.option("--portable/--no-portable", default=None, help="Force the portable or AVX-512 build (Linux NVIDIA).")
@click.option("--download-model/--no-download-model", default=None, help="Download the GGUF embedding model.")
@click.option("--skip-cuda-libs", is_flag=True, default=None, help="Never download the CUDA runtime bundle.")
@click.option("--dry-run", is_flag=True, help="Resolve the asset, download nothing.")
@click.option("--yes", "-y", "assume_defaults", is_flag=True, help="Answer every prompt with its default.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(
    ctx: click.Context,
    version_tag: str | None,
    nvidia: bool | None,
    portable: bool | None,
    download_model: bool | None,
    skip_cuda_libs: bool | None,
    dry_run: bool,
    assume_defaults: bool,
    as_json: bool,
) -> None:
    """Detect this machine, pick the matching build and install it."""
    from remembrances_installer.core.services.install.orchestration.orchestrator import (
        run_install,
    )
    from remembrances_installer.ui.cli.prompts import TerminalPrompter

    settings = _load(
        ctx,
        version=version_tag,
        nvidia=nvidia,
        portable=portable,
        download_model=download_model,
        skip_cuda_libs=skip_cuda_libs,
    )
    prompter = TerminalPrompter(assume_defaults=assume_defaults or as_json)
    quiet = ctx.obj.get("quiet", False) or as_json

    def _progress(pct: int, label: str) -> None:
        if not quiet:
            click.echo(click.style(f"[{pct}%]", fg="blue") + f" {label}")

    if not quiet:
        click.secho("\n   Remembrances-MCP Installer\n", fg="green", bold=True)
        if not prompter.interactive:
            click.secho(
                "! Non-interactive mode: using defaults for all prompts "
                "(set REMEMBRANCES_* env vars to customize)",
                fg="yellow",
            )

    try:
        result = run_install(settings, prompter=prompter, dry_run=dry_run, progress=_progress)
    except InstallError as e:
        _fail(str(e), as_json)
        return

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.remediation_error else 0)

    if not quiet:
        _print_summary(result)

    if result.remediation_error:
        click.secho(f"✗ {result.remediation_error}", fg="red")
        click.secho(
            "! The application is installed but GPU acceleration will not work "
            "until the CUDA runtime libraries are available.",
            fg="yellow",
        )
        sys.exit(1)


def _print_summary(result) -> None:
    """Human-readable end-of-run report."""
    if result.dry_run:
        click.echo()
        click.secho("Dry run: nothing downloaded.", fg="yellow", bold=True)
        _kv("Release", result.release_tag)
        if result.resolution:
            _kv("Asset", result.resolution.filename)
            if result.resolution.asset:
                _kv("URL", result.resolution.asset.download_url)
        return

    layout = result.layout
    click.echo()
    click.secho("   Remembrances-MCP Installation Complete!", fg="green", bold=True)
    click.echo()
    _kv("Version installed", result.release_tag)
    _kv("Installation directory", layout.install_dir)
    _kv("Binary & libraries", f"{layout.bin_dir}/")
    if result.remediation and result.remediation.needs_ld_library_path:
        _kv("CUDA runtime libs", f"{result.remediation.target_dir} (added to LD_LIBRARY_PATH)")
    if result.config_file:
        _kv("Configuration file", result.config_file)
    _kv("Database location", layout.data_dir / "remembrances.db")
    if result.model_path:
        _kv("GGUF model", result.model_path)
    click.echo()
    click.secho("To complete the installation, run one of the following:", fg="yellow")
    click.echo("  source ~/.bashrc     # If using bash")
    click.echo("  source ~/.zshrc      # If using zsh")
    click.echo("Or simply open a new terminal window.")
    click.echo()
    click.secho("To configure your MCP client:", fg="yellow")
    snippet = {"mcpServers": {"remembrances": {"command": str(layout.binary_path)}}}
    click.echo(json.dumps(snippet, indent=2))
    click.echo()
    if result.gpu_acceleration_ready:
        click.secho("For GPU acceleration:", fg="yellow")
        click.echo(f"  Edit {result.config_file} and set gguf-gpu-layers to a positive value")
        click.echo()


# ── Detect ──────────────────────────────────────────────────────


@click.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def detect(ctx: click.Context, as_json: bool) -> None:
    """Show platform, GPU/CUDA/SIMD capabilities and the build that fits."""
    from remembrances_installer.core.services.install.orchestration.orchestrator import (
        describe_host,
    )

    settings = _load(ctx)
    try:
        report = describe_host(settings)
    except InstallError as e:
        _fail(str(e), as_json)
        return

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    profile = report.profile
    click.secho("Detected capabilities:", fg="cyan", bold=True)
    _kv("Platform", report.platform.label())
    _kv("NVIDIA GPU", profile.has_nvidia_gpu)
    if profile.cuda_major_version is not None:
        _kv("CUDA version", f"{profile.cuda_major_version}.x (detected)")
    else:
        _kv("CUDA version", "unknown/not found")
    if report.platform.is_linux_amd64:
        _kv("AVX2", profile.has_avx2)
        _kv("AVX-512", profile.has_avx512)
        _kv("NVIDIA build", report.preference.want_nvidia)
        _kv("Portable build", report.preference.want_portable)
    _kv("Release asset", report.filename or "none")


# ── Validate ────────────────────────────────────────────────────


@click.command()
@click.argument("library", type=click.Path(path_type=Path), required=False)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def validate(library: Path | None, as_json: bool) -> None:
    """Check that the CUDA runtime libraries of LIBRARY resolve.

    Without LIBRARY, only the presence check of the CUDA 12 runtime
    libraries is run.
    """
    from remembrances_installer.core.services.install.detection.runtime_deps import (
        validate as validate_runtime,
    )

    outcome = validate_runtime(library)

    if as_json:
        click.echo(json.dumps(outcome.to_dict(), indent=2))
        sys.exit(0 if outcome.is_resolvable else 1)

    if outcome.is_resolvable:
        click.secho(f"✓ CUDA runtime libraries resolve ({outcome.strategy})", fg="green")
        return

    click.secho(f"✗ Missing CUDA runtime libraries ({outcome.strategy}):", fg="red")
    for soname in outcome.missing:
        click.echo(f"   • {soname}")
    sys.exit(1)
