# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Text repair helpers for console output captured from probe workloads."""

from __future__ import annotations

import re

# Compiled once; these run against every captured console blob.
_JSON_INT_WITH_LEADING_ZERO_RE = re.compile(r'":\s*0+[^,.]+[,}]')
_DIGITS_RE = re.compile(r"0*(\d+)")
_BRACKETED_ISO8601_RE = re.compile(r"\[[\d-]+T[\d:.]+]")


def cut_between(s: str, starting_token: str, ending_token: str) -> str:
    """
    Return the part of ``s`` between ``starting_token`` and ``ending_token``.

    Matching is greedy: everything between the leftmost starting token and the
    rightmost ending token after it. Returns "" when either token is missing.
    """
    if not starting_token or not ending_token:
        return ""
    start = s.find(starting_token)
    if start < 0:
        return ""
    content_start = start + len(starting_token)
    end = s.rfind(ending_token, content_start)
    if end < 0:
        return ""
    return s[content_start:end]


def fix_leading_zeros_in_json(str_containing_json: str) -> str:
    """
    Replace unsigned integers with leading zeros (``000``, ``061``) by valid JSON ints.

    curl 7.76 and older print ``"http_code":000``. Non-JSON text in the input goes
    through the same substitution.
    """

    def _strip(match: re.Match[str]) -> str:
        return _DIGITS_RE.sub(r"\1", match.group(0))

    return _JSON_INT_WITH_LEADING_ZERO_RE.sub(_strip, str_containing_json)


def remove_timestamps(str_containing_timestamps: str) -> str:
    """Drop the bracketed ISO-8601 timestamps EC2 injects into long console lines."""
    return _BRACKETED_ISO8601_RE.sub("", str_containing_timestamps)


__all__ = ["cut_between", "fix_leading_zeros_in_json", "remove_timestamps"]
