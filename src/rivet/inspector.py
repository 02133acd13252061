# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Side-effect-free probes describing the locally installed Foundry toolchain."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final

from .constants import HELPER_TOOL, PACKAGE_MANAGER_MARKER, PRIMARY_EXECUTABLE, VERSION_FLAG
from .logging import debug
from .process_utils import SubprocessExecutionError, find_executable, run_command
from .versioning import VersionSpec

VERSION_PATTERN: Final[re.Pattern[str]] = re.compile(r"v[0-9]+\.[0-9]+\.[0-9]+")

Locator = Callable[[str], Path | None]
CommandRunner = Callable[..., CompletedProcess[str]]


class InstallationMethod(str, Enum):
    """Enumerate how the toolchain on the search path was installed."""

    NATIVE = "native"
    PACKAGE_MANAGER = "package-manager"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ToolchainState:
    """Snapshot of the toolchain taken at one point in time."""

    installed: bool
    installation_method: InstallationMethod
    reported_version: VersionSpec | None

    def matches(self, target: VersionSpec) -> bool:
        """Return ``True`` when the reported version equals ``target`` exactly."""

        return self.reported_version == target


def parse_version_banner(banner: str) -> VersionSpec | None:
    """Extract the marker-prefixed ``major.minor.patch`` from the first banner line."""

    first_line = first_banner_line(banner)
    match = VERSION_PATTERN.search(first_line)
    if match is None:
        return None
    return VersionSpec(match.group(0))


def first_banner_line(banner: str) -> str:
    """Return the literal first line of ``banner``, blank when there is no output."""

    lines = banner.splitlines()
    return lines[0].strip() if lines else ""


def is_package_manager_banner(banner: str) -> bool:
    """Return ``True`` when the first banner line carries the package-manager marker."""

    return PACKAGE_MANAGER_MARKER in first_banner_line(banner)


class ToolchainInspector:
    """Probe the toolchain afresh on every call.

    Nothing is cached between calls: the installer mutates both the search path
    and the installed binaries, and the workflow queries the inspector before
    and after doing so.
    """

    def __init__(
        self,
        *,
        executable: str = PRIMARY_EXECUTABLE,
        helper: str = HELPER_TOOL,
        timeout: float | None = None,
        locator: Locator | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        self._executable = executable
        self._helper = helper
        self._timeout = timeout
        self._locate: Locator = locator or find_executable
        self._run: CommandRunner = runner or run_command

    def is_installed(self) -> bool:
        """Return ``True`` when the primary executable resolves on the search path."""

        return self._locate(self._executable) is not None

    def has_helper(self) -> bool:
        """Return ``True`` when the version-manager helper resolves on the search path."""

        return self._locate(self._helper) is not None

    def is_package_manager_managed(self) -> bool:
        """Return ``True`` when an installed toolchain reports a package-manager build."""

        banner = self.version_banner()
        return banner is not None and is_package_manager_banner(banner)

    def current_version(self) -> VersionSpec | None:
        """Return the version reported by the toolchain, or ``None`` when unavailable."""

        banner = self.version_banner()
        if banner is None:
            return None
        return parse_version_banner(banner)

    def version_banner(self) -> str | None:
        """Return the raw output of the version query, ``None`` when it cannot run."""

        location = self._locate(self._executable)
        if location is None:
            return None
        command: Sequence[str] = (str(location), VERSION_FLAG)
        try:
            completed = self._run(command, capture_output=True, check=True, timeout=self._timeout)
        except (OSError, ValueError, SubprocessExecutionError) as exc:
            debug(f"Version query failed: {exc}")
            return None
        return completed.stdout or ""

    def state(self) -> ToolchainState:
        """Return a fresh :class:`ToolchainState` snapshot."""

        banner = self.version_banner()
        if not self.is_installed():
            return ToolchainState(False, InstallationMethod.UNKNOWN, None)
        if banner is None:
            return ToolchainState(True, InstallationMethod.UNKNOWN, None)
        method = InstallationMethod.PACKAGE_MANAGER if is_package_manager_banner(banner) else InstallationMethod.NATIVE
        return ToolchainState(True, method, parse_version_banner(banner))


__all__ = [
    "InstallationMethod",
    "ToolchainInspector",
    "ToolchainState",
    "VERSION_PATTERN",
    "is_package_manager_banner",
    "parse_version_banner",
]
