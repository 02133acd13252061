# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from rivet.runtime.console.manager import get_console_manager


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host configuration from leaking into tests."""

    for name in (
        "RIVET_VERSION_FILE",
        "RIVET_INSTALL_URL",
        "RIVET_TERMINATE_TIMEOUT",
        "RIVET_PROBE_TIMEOUT",
        "RIVET_EMOJI",
        "RIVET_VERBOSE",
        "FOUNDRY_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    get_console_manager().clear()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Return a nested project directory without a declaration file."""

    nested = tmp_path / "workspace" / "contracts" / "src"
    nested.mkdir(parents=True)
    return nested
