# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Wiring shared by the proxy entry point and the management CLI."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from ..config import RivetSettings
from ..errors import RivetError
from ..inspector import ToolchainInspector, ToolchainState
from ..installer import ToolchainInstaller
from ..logging import GLYPH_INSTALL, GLYPH_SOURCE, GLYPH_TARGET, GLYPH_UPDATE, fail, hint, status, warn
from ..process_utils import find_executable
from ..supervisor import ProcessSupervisor
from ..versioning import Declaration, VersionSpec
from ..workflow import ConvergenceState, Inspector, Installer, WorkflowObserver


@dataclass(frozen=True, slots=True)
class Toolchain:
    """Collaborators needed to converge and run the toolchain."""

    settings: RivetSettings
    inspector: Inspector
    installer: Installer
    supervisor: ProcessSupervisor


def proxy_paths(program: str) -> tuple[Path, ...]:
    """Return the resolved locations of the running proxy.

    These are excluded from every executable lookup so a proxy installed under
    a toolchain name never resolves to itself.
    """

    candidates: list[Path] = []
    direct = Path(program)
    if direct.is_file():
        candidates.append(direct.resolve())
    found = shutil.which(program)
    if found:
        candidates.append(Path(found).resolve())
    return tuple(dict.fromkeys(candidates))


def build_toolchain(settings: RivetSettings, *, program: str) -> Toolchain:
    """Create the inspector, installer and supervisor for ``settings``."""

    excluded = proxy_paths(program)
    inspector = ToolchainInspector(
        timeout=settings.probe_timeout,
        locator=partial(find_executable, exclude=excluded),
    )
    installer = ToolchainInstaller(
        settings,
        inspector,
        on_progress=partial(status, glyph=GLYPH_INSTALL, use_emoji=settings.use_emoji),
    )
    supervisor = ProcessSupervisor(terminate_timeout=settings.terminate_timeout, exclude=excluded)
    return Toolchain(settings=settings, inspector=inspector, installer=installer, supervisor=supervisor)


def announce(declaration: Declaration, *, use_emoji: bool) -> None:
    """Print where the target version came from and what it is."""

    status(f"Using foundry version from: {declaration.path}", glyph=GLYPH_SOURCE, use_emoji=use_emoji)
    status(f"Target version: {declaration.version}", glyph=GLYPH_TARGET, use_emoji=use_emoji)


def progress_observer(target: VersionSpec, *, use_emoji: bool) -> WorkflowObserver:
    """Return a workflow observer that prints install and update progress."""

    def _observe(state: ConvergenceState, snapshot: ToolchainState | None) -> None:
        del snapshot
        if state is ConvergenceState.INSTALLING:
            status("Foundry not found. Installing foundry...", glyph=GLYPH_INSTALL, use_emoji=use_emoji)
        elif state is ConvergenceState.UPDATING:
            status(f"Foundry version mismatch. Updating to {target}...", glyph=GLYPH_UPDATE, use_emoji=use_emoji)

    return _observe


def report_error(exc: RivetError, *, use_emoji: bool) -> int:
    """Print ``exc`` and its remediation lines, returning its exit code."""

    fail(f"Error: {exc.message}", use_emoji=use_emoji)
    for line in exc.remediation:
        hint(line)
    return exc.exit_code


def report_config_error(message: str, *, use_emoji: bool = True) -> None:
    """Print an invalid-configuration message."""

    fail(f"Invalid configuration: {message}", use_emoji=use_emoji)
    warn("Check the RIVET_* environment variables.", use_emoji=use_emoji)


__all__ = [
    "Toolchain",
    "announce",
    "build_toolchain",
    "progress_observer",
    "proxy_paths",
    "report_config_error",
    "report_error",
]
