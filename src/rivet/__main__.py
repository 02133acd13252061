# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Allow ``python -m rivet`` to behave like the ``rivet`` proxy."""

from __future__ import annotations

from .cli.proxy import main

if __name__ == "__main__":
    main()
