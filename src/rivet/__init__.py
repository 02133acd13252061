# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Version-pinning command proxy for the Foundry toolchain."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
