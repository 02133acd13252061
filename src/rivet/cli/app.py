# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""``rivetctl``: inspect and converge the pinned toolchain without running it."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Annotated

import typer

from ..config import ConfigError, RivetSettings
from ..constants import DEFAULT_BINARY, EXIT_CONFIG_ERROR, TOOLCHAIN_BINARIES
from ..errors import RivetError
from ..inspector import InstallationMethod
from ..logging import info, ok, section, warn
from ..versioning import Declaration, resolve
from ..workflow import ensure_toolchain
from .shared import announce, build_toolchain, progress_observer, report_config_error, report_error
from .typer_ext import create_typer

app = create_typer(
    name="rivetctl",
    help="Inspect and converge the Foundry version pinned by .foundry-version.",
    no_args_is_help=True,
    add_completion=False,
)

DirectoryOption = Annotated[
    Path | None,
    typer.Option(
        "--directory",
        "-C",
        file_okay=False,
        help="Directory to start the .foundry-version search from (defaults to the working directory).",
    ),
]
EmojiOption = Annotated[
    bool | None,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji in status output (defaults to RIVET_EMOJI)."),
]


def _load_settings(emoji: bool | None) -> RivetSettings:
    try:
        settings = RivetSettings.from_environ(os.environ)
    except ConfigError as exc:
        report_config_error(str(exc))
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from exc
    if emoji is None:
        return settings
    return settings.model_copy(update={"use_emoji": emoji})


def _resolve_declaration(directory: Path | None, settings: RivetSettings) -> Declaration:
    try:
        return resolve(directory, file_name=settings.version_file)
    except RivetError as exc:
        raise typer.Exit(code=report_error(exc, use_emoji=settings.use_emoji)) from exc


@app.command("status")
def status_command(directory: DirectoryOption = None, emoji: EmojiOption = None) -> None:
    """Report the pinned version and the installed toolchain without changing anything."""

    settings = _load_settings(emoji)
    declaration = _resolve_declaration(directory, settings)
    section("Foundry toolchain status")
    announce(declaration, use_emoji=settings.use_emoji)
    toolchain = build_toolchain(settings, program=sys.argv[0])
    state = toolchain.inspector.state()

    if not state.installed:
        warn("Foundry is not installed.", use_emoji=settings.use_emoji)
        raise typer.Exit(code=1)
    info(f"Installed version: {state.reported_version or 'unknown'}", use_emoji=settings.use_emoji)
    info(f"Installation method: {state.installation_method.value}", use_emoji=settings.use_emoji)
    if state.installation_method is InstallationMethod.PACKAGE_MANAGER:
        warn("Package-manager installs cannot be pinned; uninstall to let rivet manage foundry.", use_emoji=settings.use_emoji)
        raise typer.Exit(code=1)
    if not state.matches(declaration.version):
        warn(f"Installed version does not match {declaration.version}.", use_emoji=settings.use_emoji)
        raise typer.Exit(code=1)
    ok(f"Foundry {declaration.version} is ready", use_emoji=settings.use_emoji)


@app.command("sync")
def sync_command(directory: DirectoryOption = None, emoji: EmojiOption = None) -> None:
    """Install or update foundry to the pinned version without running it."""

    settings = _load_settings(emoji)
    declaration = _resolve_declaration(directory, settings)
    announce(declaration, use_emoji=settings.use_emoji)
    toolchain = build_toolchain(settings, program=sys.argv[0])
    try:
        ensure_toolchain(
            declaration.version,
            toolchain.inspector,
            toolchain.installer,
            observer=progress_observer(declaration.version, use_emoji=settings.use_emoji),
        )
    except RivetError as exc:
        raise typer.Exit(code=report_error(exc, use_emoji=settings.use_emoji)) from exc
    ok(f"Foundry {declaration.version} is ready", use_emoji=settings.use_emoji)


@app.command("which")
def which_command(
    binary: Annotated[str, typer.Argument(help="Toolchain binary to locate.")] = DEFAULT_BINARY,
    emoji: EmojiOption = None,
) -> None:
    """Print the executable the proxy would run for BINARY."""

    if binary not in TOOLCHAIN_BINARIES:
        choices = ", ".join(TOOLCHAIN_BINARIES)
        raise typer.BadParameter(f"expected one of: {choices}", param_hint="BINARY")
    settings = _load_settings(emoji)
    toolchain = build_toolchain(settings, program=sys.argv[0])
    try:
        executable = toolchain.supervisor.locate(binary)
    except RivetError as exc:
        raise typer.Exit(code=report_error(exc, use_emoji=settings.use_emoji)) from exc
    typer.echo(str(executable))


def main() -> None:
    """Console-script entry point."""

    app(prog_name="rivetctl")


__all__ = ["app", "main"]
