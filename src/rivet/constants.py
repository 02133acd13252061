# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Foundry toolchain names and fixed exit codes."""

from __future__ import annotations

from typing import Final

VERSION_FILE_NAME: Final[str] = ".foundry-version"
VERSION_MARKER: Final[str] = "v"

TOOLCHAIN_BINARIES: Final[tuple[str, ...]] = ("forge", "cast", "anvil", "chisel")
DEFAULT_BINARY: Final[str] = TOOLCHAIN_BINARIES[0]
PRIMARY_EXECUTABLE: Final[str] = "forge"
VERSION_FLAG: Final[str] = "--version"
PACKAGE_MANAGER_MARKER: Final[str] = "-Homebrew"
PACKAGE_MANAGER_UNINSTALL: Final[str] = "brew uninstall foundry"

HELPER_TOOL: Final[str] = "foundryup"
HELPER_INSTALL_FLAG: Final[str] = "--install"
BOOTSTRAP_URL: Final[str] = "https://foundry.paradigm.xyz"
BOOTSTRAP_SHELL: Final[str] = "bash"

ZSH_STARTUP_FILE: Final[str] = "~/.zshenv"
BASH_STARTUP_FILE: Final[str] = "~/.bashrc"
DEFAULT_SHELL: Final[str] = "/bin/bash"
DEFAULT_FOUNDRY_DIR: Final[str] = "~/.foundry"

# Suffixes ignored when matching the proxy's own program name.
PROGRAM_SUFFIXES: Final[tuple[str, ...]] = (".exe", ".py")

EXIT_CONFIG_ERROR: Final[int] = 2
EXIT_DECLARATION_NOT_FOUND: Final[int] = 2
EXIT_EMPTY_DECLARATION: Final[int] = 3
EXIT_INSTALLATION_FAILED: Final[int] = 4
EXIT_UNSUPPORTED_INSTALLATION: Final[int] = 5
EXIT_UPDATE_FAILED: Final[int] = 6
EXIT_SPAWN_FAILED: Final[int] = 127
SIGNAL_EXIT_BASE: Final[int] = 128

__all__ = [
    "BASH_STARTUP_FILE",
    "BOOTSTRAP_SHELL",
    "BOOTSTRAP_URL",
    "DEFAULT_BINARY",
    "DEFAULT_FOUNDRY_DIR",
    "DEFAULT_SHELL",
    "EXIT_CONFIG_ERROR",
    "EXIT_DECLARATION_NOT_FOUND",
    "EXIT_EMPTY_DECLARATION",
    "EXIT_INSTALLATION_FAILED",
    "EXIT_SPAWN_FAILED",
    "EXIT_UNSUPPORTED_INSTALLATION",
    "EXIT_UPDATE_FAILED",
    "HELPER_INSTALL_FLAG",
    "HELPER_TOOL",
    "PACKAGE_MANAGER_MARKER",
    "PACKAGE_MANAGER_UNINSTALL",
    "PRIMARY_EXECUTABLE",
    "PROGRAM_SUFFIXES",
    "SIGNAL_EXIT_BASE",
    "TOOLCHAIN_BINARIES",
    "VERSION_FILE_NAME",
    "VERSION_FLAG",
    "VERSION_MARKER",
    "ZSH_STARTUP_FILE",
]
