# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing logging helpers with optional colour and emoji support."""

from __future__ import annotations

import os
from typing import Final

from rich.rule import Rule
from rich.text import Text

from .runtime.console.manager import detect_tty, get_console_manager

VERBOSE_ENV: Final[str] = "RIVET_VERBOSE"

GLYPH_SOURCE: Final[str] = "📋 "
GLYPH_TARGET: Final[str] = "🎯 "
GLYPH_INSTALL: Final[str] = "🔧 "
GLYPH_UPDATE: Final[str] = "🔄 "


def emoji(symbol: str, enable: bool) -> str:
    """Return ``symbol`` when emoji output is enabled, otherwise blank."""

    return symbol if enable else ""


def _print_line(
    msg: str,
    *,
    style: str | None,
    use_emoji: bool,
    use_color: bool | None = None,
) -> None:
    """Render ``msg`` to the status console using shared styling helpers.

    Args:
        msg: Message text to print to the console.
        style: Rich style name to apply when colour output is active.
        use_emoji: Flag indicating whether emoji output is desired.
        use_color: Optional explicit colour flag overriding TTY detection.
    """

    color_enabled = detect_tty() if use_color is None else use_color
    console = get_console_manager().get(color=color_enabled, emoji=use_emoji)
    text = Text(msg)
    if style and color_enabled:
        text.stylize(style)
    console.print(text)


def section(title: str, *, use_color: bool | None = None) -> None:
    """Render a section header to delineate console output blocks."""

    color_enabled = detect_tty() if use_color is None else use_color
    console = get_console_manager().get(color=color_enabled, emoji=False)
    if color_enabled:
        console.print()
        console.print(Rule(title))
    else:
        console.print(f"\n--- {title} ---")


def status(msg: str, *, glyph: str, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a progress message prefixed with an arbitrary category ``glyph``."""

    _print_line(f"{emoji(glyph, use_emoji)}{msg}", style="blue", use_emoji=use_emoji, use_color=use_color)


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an informational message."""

    _print_line(f"{emoji('ℹ️ ', use_emoji)}{msg}", style="cyan", use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a success message."""

    _print_line(f"{emoji('✅ ', use_emoji)}{msg}", style="green", use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a warning message."""

    _print_line(f"{emoji('⚠️ ', use_emoji)}{msg}", style="yellow", use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an error message."""

    _print_line(f"{emoji('❌ ', use_emoji)}{msg}", style="red", use_emoji=use_emoji, use_color=use_color)


def hint(msg: str, *, use_color: bool | None = None) -> None:
    """Emit an indented remediation line beneath a failure."""

    _print_line(f"   {msg}", style=None, use_emoji=False, use_color=use_color)


def debug(msg: str) -> None:
    """Emit a diagnostic message when ``RIVET_VERBOSE`` is set."""

    value = os.environ.get(VERBOSE_ENV, "").strip().lower()
    if value and value not in {"0", "false", "no", "off"}:
        _print_line(f"[rivet] {msg}", style="magenta", use_emoji=False)


__all__ = [
    "GLYPH_INSTALL",
    "GLYPH_SOURCE",
    "GLYPH_TARGET",
    "GLYPH_UPDATE",
    "debug",
    "emoji",
    "fail",
    "hint",
    "info",
    "ok",
    "section",
    "status",
    "warn",
]
