# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Install Foundry from scratch or converge it onto a declared version.

Both operations are single-shot: every external command runs exactly once and
any failure surfaces as a fatal :class:`~rivet.errors.RivetError` carrying the
commands a user can run to recover by hand.
"""

from __future__ import annotations

import os
import urllib.request
from collections.abc import Callable, MutableMapping
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final

from .config import RivetSettings
from .constants import (
    BASH_STARTUP_FILE,
    BOOTSTRAP_SHELL,
    HELPER_INSTALL_FLAG,
    HELPER_TOOL,
    ZSH_STARTUP_FILE,
)
from .errors import InstallationFailedError, UpdateFailedError
from .inspector import ToolchainInspector
from .logging import debug
from .process_utils import SubprocessExecutionError, find_executable, run_command
from .versioning import VersionSpec

CommandRunner = Callable[..., CompletedProcess[str]]
Fetcher = Callable[[str, float], str]
Progress = Callable[[str], None]

_PATH_PROBE: Final[str] = '. "$1" >/dev/null 2>&1; printf %s "$PATH"'


def is_zsh(shell: str) -> bool:
    """Return ``True`` when ``shell`` names zsh (case-insensitive substring match)."""

    return "zsh" in shell.lower()


def startup_file_for(shell: str) -> str:
    """Return the unexpanded startup file matching ``shell``.

    Zsh users get ``~/.zshenv``; every other shell is treated as bash-compatible.
    """

    return ZSH_STARTUP_FILE if is_zsh(shell) else BASH_STARTUP_FILE


def fetch_bootstrap_script(url: str, timeout: float) -> str:
    """Download the bootstrap installer located at ``url``.

    Raises:
        OSError: If the download fails.
    """

    # Bandit: the URL is the configured Foundry bootstrap endpoint.
    with urllib.request.urlopen(url, timeout=timeout) as response:  # nosec B310
        payload: bytes = response.read()
    return payload.decode("utf-8", errors="replace")


class ToolchainInstaller:
    """Run the Foundry bootstrap and the ``foundryup`` helper."""

    def __init__(
        self,
        settings: RivetSettings,
        inspector: ToolchainInspector,
        *,
        runner: CommandRunner | None = None,
        fetcher: Fetcher | None = None,
        environ: MutableMapping[str, str] | None = None,
        on_progress: Progress | None = None,
    ) -> None:
        self._settings = settings
        self._inspector = inspector
        self._run: CommandRunner = runner or run_command
        self._fetch: Fetcher = fetcher or fetch_bootstrap_script
        self._environ: MutableMapping[str, str] = os.environ if environ is None else environ
        self._progress: Progress = on_progress or debug

    @property
    def startup_file(self) -> str:
        """Startup file the user must source to pick up the installed helper."""

        return startup_file_for(self._settings.shell)

    def install(self) -> None:
        """Bootstrap Foundry and complete the installation with ``foundryup``.

        Raises:
            InstallationFailedError: If the bootstrap cannot be fetched or run,
                the helper is still missing afterwards, or the helper fails.
        """

        self._run_bootstrap()
        self.refresh_environment()
        if not self._inspector.has_helper():
            raise InstallationFailedError(
                "Failed to install foundry. Please run these commands manually:",
                remediation=(
                    f"source {self.startup_file} # or start a new terminal",
                    HELPER_TOOL,
                ),
            )
        try:
            self._run([HELPER_TOOL], check=True)
        except (OSError, SubprocessExecutionError) as exc:
            raise InstallationFailedError(
                f"{HELPER_TOOL} failed to complete the installation: {exc}",
                remediation=(HELPER_TOOL,),
            ) from exc

    def update(self, target: VersionSpec) -> None:
        """Install ``target`` with ``foundryup --install``.

        Raises:
            UpdateFailedError: If the helper is missing or exits non-zero.
        """

        manual = f"{HELPER_TOOL} {HELPER_INSTALL_FLAG} {target}"
        if not self._inspector.has_helper():
            raise UpdateFailedError(f"{HELPER_TOOL} not found. Please run: {manual}", remediation=(manual,))
        try:
            self._run([HELPER_TOOL, HELPER_INSTALL_FLAG, str(target)], check=True)
        except (OSError, SubprocessExecutionError) as exc:
            raise UpdateFailedError(
                f"{HELPER_TOOL} could not install {target}: {exc}",
                remediation=(manual,),
            ) from exc

    def refresh_environment(self) -> bool:
        """Pick up ``PATH`` changes the bootstrap wrote to shell startup files.

        Best effort and possibly a no-op: the startup file is sourced in a child
        shell and the resulting ``PATH`` adopted, then the default helper
        directory is prepended when it exists. Failures are logged and ignored.

        Returns:
            bool: ``True`` when ``PATH`` changed.
        """

        before = self._environ.get("PATH", "")
        startup = self.startup_file
        shell_name = "zsh" if is_zsh(self._settings.shell) else BOOTSTRAP_SHELL
        self._progress(f"{shell_name.upper()} detected. Sourcing {startup}...")
        sourced = self._source_startup_path(shell_name, Path(startup).expanduser())
        if sourced:
            self._environ["PATH"] = sourced
        helper_dir = self._settings.helper_bin_dir
        if helper_dir.is_dir():
            entries = [entry for entry in self._environ.get("PATH", "").split(os.pathsep) if entry]
            if str(helper_dir) not in entries:
                self._environ["PATH"] = os.pathsep.join([str(helper_dir), *entries])
        return self._environ.get("PATH", "") != before

    def _source_startup_path(self, shell_name: str, startup: Path) -> str | None:
        if not startup.is_file():
            debug(f"Startup file {startup} does not exist; skipping")
            return None
        shell = find_executable(shell_name, path=self._environ.get("PATH", os.defpath))
        if shell is None:
            debug(f"{shell_name} not found; cannot source {startup}")
            return None
        try:
            completed = self._run(
                [str(shell), "-c", _PATH_PROBE, shell_name, str(startup)],
                check=True,
                capture_output=True,
                timeout=self._settings.probe_timeout,
                env=dict(self._environ),
            )
        except (OSError, ValueError, SubprocessExecutionError) as exc:
            debug(f"Sourcing {startup} failed: {exc}")
            return None
        value = (completed.stdout or "").strip()
        return value or None

    def _run_bootstrap(self) -> None:
        url = self._settings.install_url
        self._progress(f"Fetching foundry installer from {url}")
        try:
            script = self._fetch(url, self._settings.probe_timeout)
        except OSError as exc:
            raise InstallationFailedError(
                f"Unable to download the foundry installer from {url}: {exc}",
                remediation=(f"curl -L {url} | bash", HELPER_TOOL),
            ) from exc
        try:
            self._run([BOOTSTRAP_SHELL], check=True, input=script, env=dict(self._environ))
        except (OSError, SubprocessExecutionError) as exc:
            raise InstallationFailedError(
                f"The foundry installer failed: {exc}",
                remediation=(f"curl -L {url} | bash", HELPER_TOOL),
            ) from exc


__all__ = [
    "ToolchainInstaller",
    "fetch_bootstrap_script",
    "is_zsh",
    "startup_file_for",
]
