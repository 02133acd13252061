# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Converge the installed toolchain onto the declared version.

Presence is ensured first, then package-manager builds are rejected, and only
then is a version mismatch corrected. An update is never attempted against a
package-manager build.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Protocol, runtime_checkable

from .constants import PACKAGE_MANAGER_UNINSTALL
from .errors import UnsupportedInstallationError, UpdateFailedError
from .inspector import ToolchainState
from .versioning import VersionSpec


class ConvergenceState(str, Enum):
    """States visited while converging the toolchain."""

    NO_TOOLCHAIN = "no-toolchain"
    INSTALLING = "installing"
    INSTALLED = "installed"
    UPDATING = "updating"
    READY = "ready"
    FATAL_UNSUPPORTED = "fatal-unsupported"


@runtime_checkable
class Inspector(Protocol):
    """Queries the workflow makes against the installed toolchain."""

    def is_installed(self) -> bool: ...

    def is_package_manager_managed(self) -> bool: ...

    def current_version(self) -> VersionSpec | None: ...

    def state(self) -> ToolchainState: ...


class Installer(Protocol):
    """Operations the workflow needs from an installer."""

    def install(self) -> None: ...

    def update(self, target: VersionSpec) -> None: ...


WorkflowObserver = Callable[[ConvergenceState, ToolchainState | None], None]


def _ignore(state: ConvergenceState, snapshot: ToolchainState | None) -> None:
    del state, snapshot


def ensure_toolchain(
    target: VersionSpec,
    inspector: Inspector,
    installer: Installer,
    *,
    observer: WorkflowObserver | None = None,
) -> ToolchainState:
    """Install or update the toolchain until it reports ``target``.

    Args:
        target: Declared version the toolchain must report.
        inspector: Probe used to query the toolchain before and after mutation.
        installer: Performs the install and update side effects.
        observer: Optional callback notified on every state transition.

    Returns:
        ToolchainState: Verified snapshot of the ready toolchain.

    Raises:
        InstallationFailedError: Propagated from :meth:`Installer.install`.
        UnsupportedInstallationError: If the toolchain comes from a package manager.
        UpdateFailedError: If the update fails or verification still mismatches.
    """

    notify = observer or _ignore

    if not inspector.is_installed():
        notify(ConvergenceState.NO_TOOLCHAIN, None)
        notify(ConvergenceState.INSTALLING, None)
        installer.install()

    if inspector.is_package_manager_managed():
        notify(ConvergenceState.FATAL_UNSUPPORTED, None)
        raise UnsupportedInstallationError(
            "Foundry is installed via Homebrew",
            remediation=(
                "Homebrew does not support rolling back to specific versions",
                "Please uninstall foundry via Homebrew (rivet will then install the correct version):",
                PACKAGE_MANAGER_UNINSTALL,
            ),
        )

    current = inspector.current_version()
    notify(ConvergenceState.INSTALLED, None)
    if current != target:
        notify(ConvergenceState.UPDATING, None)
        installer.update(target)

    if not inspector.is_installed():
        raise UpdateFailedError("Foundry installation failed")
    final = inspector.state()
    if final.reported_version != target:
        reported = final.reported_version or "unknown"
        raise UpdateFailedError(f"Failed to update foundry to {target}. Current version: {reported}")

    notify(ConvergenceState.READY, final)
    return final


__all__ = ["ConvergenceState", "Inspector", "Installer", "WorkflowObserver", "ensure_toolchain"]
