# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Locate and normalise the project's declared Foundry version."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from .constants import VERSION_FILE_NAME, VERSION_MARKER
from .errors import DeclarationNotFoundError, DeclarationReadError, EmptyDeclarationError


@dataclass(frozen=True, slots=True)
class VersionSpec:
    """Normalised version string, always prefixed with the version marker.

    Equality is exact string equality on :attr:`value`; no semantic ordering
    is applied.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value.startswith(VERSION_MARKER):
            raise ValueError(f"VersionSpec must start with {VERSION_MARKER!r}: {self.value!r}")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw: str) -> VersionSpec:
        """Return a :class:`VersionSpec` for ``raw`` after normalisation."""

        return cls(normalize(raw))


@dataclass(frozen=True, slots=True)
class Declaration:
    """Declared target version together with the file it was read from."""

    version: VersionSpec
    path: Path


def normalize(raw: str) -> str:
    """Return ``raw`` prefixed with the version marker exactly once.

    Args:
        raw: Trimmed version token read from a declaration file.

    Returns:
        str: ``raw`` unchanged when it already starts with the marker,
        otherwise ``raw`` with the marker prepended.
    """

    if raw.startswith(VERSION_MARKER):
        return raw
    return f"{VERSION_MARKER}{raw}"


def clean_declaration(content: str) -> str:
    """Strip every newline character and surrounding whitespace from ``content``."""

    return content.replace("\r", "").replace("\n", "").strip()


def iter_search_dirs(start: Path) -> Iterator[Path]:
    """Yield ``start`` and each of its ancestors up to the filesystem root."""

    current = start
    yield current
    yield from current.parents


def find_declaration_file(start: Path, file_name: str = VERSION_FILE_NAME) -> Path | None:
    """Return the nearest ``file_name`` at or above ``start``.

    Args:
        start: Absolute directory to begin the upward search from.
        file_name: Declaration file name to look for.

    Returns:
        Path | None: Location of the nearest regular file, ``None`` when none exists.
    """

    for directory in iter_search_dirs(start):
        candidate = directory / file_name
        if candidate.is_file():
            return candidate
    return None


def resolve(start: Path | None = None, *, file_name: str = VERSION_FILE_NAME) -> Declaration:
    """Resolve the declared version for ``start`` (defaults to the working directory).

    Args:
        start: Directory to begin the upward search from.
        file_name: Declaration file name to look for.

    Returns:
        Declaration: Normalised version and the file that declared it.

    Raises:
        DeclarationNotFoundError: If no ancestor directory holds the file.
        EmptyDeclarationError: If the nearest file is blank.
        DeclarationReadError: If the nearest file cannot be read as UTF-8 text.
    """

    origin = (start or Path.cwd()).resolve()
    path = find_declaration_file(origin, file_name)
    if path is None:
        raise DeclarationNotFoundError(origin, file_name)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DeclarationReadError(path, str(exc)) from exc
    trimmed = clean_declaration(content)
    if not trimmed:
        raise EmptyDeclarationError(path)
    return Declaration(version=VersionSpec.parse(trimmed), path=path)


__all__ = [
    "Declaration",
    "VersionSpec",
    "clean_declaration",
    "find_declaration_file",
    "iter_search_dirs",
    "normalize",
    "resolve",
]
