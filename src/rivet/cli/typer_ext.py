# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typer classes giving ``rivetctl`` a stable, plain-text help layout.

Every command lists its arguments, then its options alphabetically by long
name, then the environment variables that configure the proxy.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import typer
from click.core import Argument, Context, Parameter
from click.formatting import HelpFormatter
from typer.core import TyperCommand, TyperGroup

from ..config import environment_help

F = TypeVar("F", bound=Callable[..., Any])

HelpRecord = tuple[str, str]


def option_sort_key(param: Parameter) -> str:
    """Return the lower-cased long name used to order ``param`` in help output."""

    names = [*getattr(param, "opts", ()), *getattr(param, "secondary_opts", ())]
    for name in names:
        if name.startswith("--"):
            return name[2:].lower()
    fallback = names[0] if names else param.name or ""
    return fallback.lstrip("-").lower()


def split_help_records(params: Sequence[Parameter], ctx: Context) -> tuple[list[HelpRecord], list[HelpRecord]]:
    """Return argument records in declaration order and option records sorted by name."""

    arguments: list[HelpRecord] = []
    options: list[tuple[str, int, HelpRecord]] = []
    for position, param in enumerate(params):
        record = param.get_help_record(ctx)
        if record is None:
            continue
        if isinstance(param, Argument):
            arguments.append(record)
        else:
            options.append((option_sort_key(param), position, record))
    options.sort(key=lambda item: item[:2])
    return arguments, [record for _, _, record in options]


class RivetCommand(TyperCommand):
    """Command whose help ends with the proxy's environment variables."""

    def format_options(self, ctx: Context, formatter: HelpFormatter) -> None:
        arguments, options = split_help_records(self.get_params(ctx), ctx)
        for title, records in (("Arguments", arguments), ("Options", options), ("Environment", environment_help())):
            if records:
                with formatter.section(title):
                    formatter.write_dl(records)


class RivetGroup(TyperGroup):
    """Group that builds :class:`RivetCommand` subcommands."""

    command_class = RivetCommand


class RivetTyper(typer.Typer):
    """Typer application wired to :class:`RivetGroup` and :class:`RivetCommand`."""

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("cls", RivetGroup)
        # Rich help rendering bypasses ``format_options``.
        kwargs.setdefault("rich_markup_mode", None)
        super().__init__(**kwargs)

    def command(self, name: str | None = None, **kwargs: Any) -> Callable[[F], F]:
        kwargs.setdefault("cls", RivetCommand)
        return super().command(name, **kwargs)


def create_typer(**kwargs: Any) -> RivetTyper:
    """Return a :class:`RivetTyper` configured with ``kwargs``."""

    return RivetTyper(**kwargs)


__all__ = ["RivetCommand", "RivetGroup", "RivetTyper", "create_typer", "option_sort_key", "split_help_records"]
