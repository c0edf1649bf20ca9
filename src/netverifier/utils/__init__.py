# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Utility exports."""

from .duration import duration_to_bare_seconds, parse_duration
from .text import cut_between, fix_leading_zeros_in_json, remove_timestamps

__all__ = [
    "cut_between",
    "duration_to_bare_seconds",
    "fix_leading_zeros_in_json",
    "parse_duration",
    "remove_timestamps",
]
