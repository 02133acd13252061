# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for status console provisioning and the logging helpers."""

from __future__ import annotations

import io
import sys

import pytest

from rivet.logging import GLYPH_TARGET, debug, fail, hint, section, status
from rivet.runtime.console import RichConsoleManager, detect_tty


def test_consoles_are_reused_per_stream(monkeypatch: pytest.MonkeyPatch) -> None:
    manager = RichConsoleManager()
    first = io.StringIO()
    monkeypatch.setattr(sys, "stderr", first)

    console = manager.get(color=True, emoji=True)

    assert manager.get(color=True, emoji=True) is console
    assert manager.get(color=True, emoji=False) is not console

    monkeypatch.setattr(sys, "stderr", io.StringIO())
    assert manager.get(color=True, emoji=True) is not console


def test_non_terminal_stream_disables_colour(monkeypatch: pytest.MonkeyPatch) -> None:
    buffer = io.StringIO()
    monkeypatch.setattr(sys, "stderr", buffer)

    assert detect_tty() is False
    fail("boom", use_emoji=False, use_color=None)

    assert buffer.getvalue() == "boom\n"


def test_status_lines_carry_optional_glyph(capsys: pytest.CaptureFixture[str]) -> None:
    status("Target version: v1.2.3", glyph=GLYPH_TARGET, use_emoji=True)
    status("Target version: v1.2.3", glyph=GLYPH_TARGET, use_emoji=False)
    hint("foundryup")
    section("Summary")

    lines = capsys.readouterr().err.splitlines()
    assert lines[:3] == ["🎯 Target version: v1.2.3", "Target version: v1.2.3", "   foundryup"]
    assert lines[-1] == "--- Summary ---"


def test_debug_is_silent_unless_verbose(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    debug("hidden")
    monkeypatch.setenv("RIVET_VERBOSE", "off")
    debug("still hidden")
    monkeypatch.setenv("RIVET_VERBOSE", "1")
    debug("shown")

    assert capsys.readouterr().err == "[rivet] shown\n"
