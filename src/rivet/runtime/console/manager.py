# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rich consoles for status output written alongside the proxied toolchain."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from functools import cache
from typing import TextIO

from rich.console import Console


def detect_tty(stream: TextIO | None = None) -> bool:
    """Return ``True`` when ``stream`` (stderr by default) is a terminal.

    The toolchain owns stdout, so status output and colour decisions follow
    stderr.
    """

    target = sys.stderr if stream is None else stream
    try:
        return target.isatty()
    except (AttributeError, ValueError):
        return False


@dataclass(frozen=True, slots=True)
class ConsoleProfile:
    """Rendering preferences resolved against the current stderr stream."""

    color: bool
    emoji: bool
    tty: bool
    stream_id: int

    @classmethod
    def current(cls, *, color: bool, emoji: bool) -> ConsoleProfile:
        stream = sys.stderr
        tty = detect_tty(stream)
        return cls(color=color and tty, emoji=emoji, tty=tty, stream_id=id(stream))


class RichConsoleManager:
    """Hand out one :class:`Console` per :class:`ConsoleProfile`.

    A replaced ``sys.stderr`` (pytest capture, ``CliRunner``) yields a new
    profile and therefore a console bound to the new stream.
    """

    def __init__(self) -> None:
        self._consoles: dict[ConsoleProfile, Console] = {}

    def get(self, *, color: bool, emoji: bool) -> Console:
        """Return the console for ``color``/``emoji`` on the current stderr."""

        profile = ConsoleProfile.current(color=color, emoji=emoji)
        console = self._consoles.get(profile)
        if console is None:
            console = self._consoles[profile] = _build_console(profile)
        return console

    def clear(self) -> None:
        """Forget every console created so far."""

        self._consoles.clear()


def _build_console(profile: ConsoleProfile) -> Console:
    return Console(
        file=sys.stderr,
        color_system="auto" if profile.color else None,
        force_terminal=profile.tty,
        no_color=not profile.color,
        emoji=profile.emoji,
        soft_wrap=True,
        highlight=False,
    )


@cache
def get_console_manager() -> RichConsoleManager:
    """Return the process-wide :class:`RichConsoleManager`."""

    return RichConsoleManager()


__all__ = ["ConsoleProfile", "RichConsoleManager", "detect_tty", "get_console_manager"]
