# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Locate a probe's payload between its tokens in captured output."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..utils.text import cut_between


class ExtractionState(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    RUNNING = "RUNNING"
    CORRUPTED = "CORRUPTED"
    COMPLETE = "COMPLETE"


@dataclass(frozen=True)
class Extraction:
    state: ExtractionState
    payload: str = ""
    reason: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.state in {ExtractionState.CORRUPTED, ExtractionState.COMPLETE}


def extract_probe_output(raw: str | None, starting_token: str, ending_token: str) -> Extraction:
    """
    Classify ``raw`` and, once complete, return everything between the tokens.

    - no tokens: NOT_STARTED
    - starting token only: RUNNING
    - ending token with no ending token after the first starting token: CORRUPTED
    - both, with a whitespace-only payload: CORRUPTED
    - both otherwise: COMPLETE, payload byte-for-byte
    """
    text = raw or ""
    start = text.find(starting_token)
    if start < 0:
        if ending_token in text:
            return Extraction(ExtractionState.CORRUPTED, reason=f"found '{ending_token}' without '{starting_token}'")
        return Extraction(ExtractionState.NOT_STARTED)

    if text.find(ending_token, start + len(starting_token)) < 0:
        if ending_token in text:
            return Extraction(
                ExtractionState.CORRUPTED,
                reason=f"found '{ending_token}' only before '{starting_token}'",
            )
        return Extraction(ExtractionState.RUNNING)

    payload = cut_between(text, starting_token, ending_token)
    if not payload.strip():
        return Extraction(
            ExtractionState.CORRUPTED,
            reason=f"nothing between '{starting_token}' and '{ending_token}'",
        )
    return Extraction(ExtractionState.COMPLETE, payload=payload)


__all__ = ["Extraction", "ExtractionState", "extract_probe_output"]
