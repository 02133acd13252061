# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Fatal error taxonomy raised while converging and proxying the toolchain."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import ClassVar

from .constants import (
    EXIT_DECLARATION_NOT_FOUND,
    EXIT_EMPTY_DECLARATION,
    EXIT_INSTALLATION_FAILED,
    EXIT_SPAWN_FAILED,
    EXIT_UNSUPPORTED_INSTALLATION,
    EXIT_UPDATE_FAILED,
)


class RivetError(Exception):
    """Base class for fatal conditions that terminate the proxy.

    Attributes:
        exit_code: Fixed process status reported for the failure class.
        remediation: Actionable lines printed after the error message.
    """

    exit_code: ClassVar[int] = 1

    def __init__(self, message: str, *, remediation: Sequence[str] = ()) -> None:
        """Initialise the error with a message and optional remediation steps.

        Args:
            message: Human-readable summary of the failure.
            remediation: Lines describing how the user can recover manually.
        """

        super().__init__(message)
        self.message = message
        self.remediation: tuple[str, ...] = tuple(remediation)


class DeclarationNotFoundError(RivetError):
    """Raised when no ancestor directory holds a version declaration file."""

    exit_code: ClassVar[int] = EXIT_DECLARATION_NOT_FOUND

    def __init__(self, start: Path, file_name: str) -> None:
        super().__init__(
            f"No {file_name} file found in {start} or any parent directory",
            remediation=(
                f"Please create a {file_name} file with the desired foundry version (e.g., 'v1.2.3')",
                f"Example: echo 'v1.2.3' > {file_name}",
            ),
        )
        self.start = start
        self.file_name = file_name


class EmptyDeclarationError(RivetError):
    """Raised when the declaration file holds nothing but whitespace."""

    exit_code: ClassVar[int] = EXIT_EMPTY_DECLARATION

    def __init__(self, path: Path) -> None:
        super().__init__(f"{path.name} file is empty: {path}")
        self.path = path


class DeclarationReadError(RivetError):
    """Raised when the declaration file exists but cannot be read."""

    exit_code: ClassVar[int] = EXIT_EMPTY_DECLARATION

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Unable to read {path}: {reason}")
        self.path = path


class InstallationFailedError(RivetError):
    """Raised when bootstrapping Foundry did not yield a usable helper tool."""

    exit_code: ClassVar[int] = EXIT_INSTALLATION_FAILED


class UnsupportedInstallationError(RivetError):
    """Raised when the toolchain is managed by a package manager."""

    exit_code: ClassVar[int] = EXIT_UNSUPPORTED_INSTALLATION


class UpdateFailedError(RivetError):
    """Raised when the helper tool failed or the version still mismatches."""

    exit_code: ClassVar[int] = EXIT_UPDATE_FAILED


class ChildSpawnError(RivetError):
    """Raised when the resolved toolchain binary cannot be started."""

    exit_code: ClassVar[int] = EXIT_SPAWN_FAILED

    def __init__(self, binary: str, reason: str) -> None:
        super().__init__(f"Unable to start {binary}: {reason}")
        self.binary = binary


__all__ = [
    "ChildSpawnError",
    "DeclarationNotFoundError",
    "DeclarationReadError",
    "EmptyDeclarationError",
    "InstallationFailedError",
    "RivetError",
    "UnsupportedInstallationError",
    "UpdateFailedError",
]
