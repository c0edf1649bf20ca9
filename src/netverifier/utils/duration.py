# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Duration parsing for userdata timing variables."""

from __future__ import annotations

import math
import re

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_RE = re.compile(r"^([+-]?)((?:\d+(?:\.\d*)?|\.\d+)(?:ns|us|µs|ms|s|m|h))+$")
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_FLOAT_RE = re.compile(r"-?\d+(\.\d*)?")


def parse_duration(value: str) -> float | None:
    """Parse a Go-style duration (``"3s"``, ``"1m30s"``, ``"-1h"``) into seconds."""
    raw = value.strip()
    match = _DURATION_RE.match(raw)
    if not match:
        return None
    total = sum(float(number) * _UNIT_SECONDS[unit] for number, unit in _DURATION_PART_RE.findall(raw))
    return -total if match.group(1) == "-" else total


def duration_to_bare_seconds(possible_duration: str | None) -> float:
    """
    Convert a duration-ish string to a float number of seconds.

    Tries a unit-suffixed duration first, then the leftmost bare number in the
    string. Empty strings, NaN, infinity and number-free strings yield 0.
    """
    if possible_duration is None or not str(possible_duration).strip():
        return 0.0
    text = str(possible_duration)

    parsed = parse_duration(text)
    if parsed is not None:
        return parsed

    match = _FLOAT_RE.search(text)
    if match:
        number = float(match.group(0))
        return number if math.isfinite(number) else 0.0
    return 0.0


__all__ = ["duration_to_bare_seconds", "parse_duration"]
