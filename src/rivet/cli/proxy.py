# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Entry point for ``rivet [forge|cast|anvil|chisel] <args...>``.

Arguments are read verbatim from :data:`sys.argv`; nothing is parsed so that
``--help``, ``--`` and every other token reach the toolchain untouched.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import NoReturn

from ..config import ConfigError, RivetSettings
from ..constants import EXIT_CONFIG_ERROR
from ..errors import RivetError
from ..logging import debug, ok
from ..supervisor import resolve_invocation
from ..versioning import resolve
from ..workflow import ensure_toolchain
from .shared import announce, build_toolchain, progress_observer, report_config_error, report_error


def run(
    program: str,
    args: Sequence[str],
    *,
    environ: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> int:
    """Converge the toolchain and run the requested binary.

    Args:
        program: Name the proxy was invoked as.
        args: Arguments following the program name.
        environ: Environment used for settings; :data:`os.environ` when ``None``.
        cwd: Directory to start the declaration search from.

    Returns:
        int: The child's exit status, or the fixed code of a fatal condition.
    """

    try:
        settings = RivetSettings.from_environ(os.environ if environ is None else environ)
    except ConfigError as exc:
        report_config_error(str(exc))
        return EXIT_CONFIG_ERROR

    debug(f"Settings: {settings.model_dump(mode='json')}")
    use_emoji = settings.use_emoji
    try:
        declaration = resolve(cwd, file_name=settings.version_file)
        announce(declaration, use_emoji=use_emoji)
        toolchain = build_toolchain(settings, program=program)
        ensure_toolchain(
            declaration.version,
            toolchain.inspector,
            toolchain.installer,
            observer=progress_observer(declaration.version, use_emoji=use_emoji),
        )
        ok(f"Foundry {declaration.version} is ready", use_emoji=use_emoji)
        return toolchain.supervisor.run(resolve_invocation(program, args))
    except RivetError as exc:
        return report_error(exc, use_emoji=use_emoji)


def main(argv: Sequence[str] | None = None) -> NoReturn:
    """Console-script entry point."""

    args = list(sys.argv[1:] if argv is None else argv)
    sys.exit(run(sys.argv[0], args))


if __name__ == "__main__":
    main()
