# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command-line entry points: the ``rivet`` proxy and ``rivetctl``."""
