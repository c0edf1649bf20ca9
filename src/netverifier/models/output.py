# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Verification verdict container."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from ..errors import EgressURLError, GenericError

logger = logging.getLogger(__name__)

_LOG_FORMAT = " - {}\n"


def _format_items(items: Iterable[Any]) -> str:
    lines = [_LOG_FORMAT.format(item) for item in items]
    if not lines:
        return ""
    return "".join(lines) + "\n"


@dataclass
class Output:
    """
    Result of a single verification run.

    - ``failures``: egress endpoints confirmed unreachable.
    - ``exceptions``: conditions that kept the run from reaching a verdict.
    - ``errors``: unexpected faults in the verifier machinery.
    - ``debug_logs``: diagnostics only, ignored by ``is_successful``.

    Entries are only ever appended. One instance per run; merge after concurrent
    runs have finished instead of sharing.
    """

    failures: list[str] = field(default_factory=list)
    exceptions: list[str] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)
    debug_logs: list[str] = field(default_factory=list)

    def add_debug_logs(self, log: str) -> None:
        logger.debug("%s", log)
        self.debug_logs.append(log)

    def add_error(self, err: BaseException | str | None) -> Output:
        """Record an unhandled error, wrapped as GenericError. None is ignored."""
        if err is None:
            return self
        if isinstance(err, GenericError):
            self.errors.append(err)
        else:
            self.errors.append(GenericError(err))
        return self

    def add_exception(self, message: BaseException | str) -> Output:
        self.exceptions.append(str(message))
        return self

    def set_egress_failures(self, failures: Iterable[str]) -> None:
        """Bulk-append egress failures."""
        self.failures.extend(str(failure) for failure in failures)

    def is_successful(self) -> bool:
        return not (self.failures or self.exceptions or self.errors)

    def parse(self) -> tuple[list[str], list[str], list[Exception]]:
        """Return copies of (failures, exceptions, errors)."""
        return list(self.failures), list(self.exceptions), list(self.errors)

    def egress_url_failures(self) -> list[EgressURLError]:
        return [EgressURLError(failure) for failure in self.failures]

    def merge(self, other: Output) -> Output:
        """Append everything recorded in ``other`` (a finished, independent run)."""
        self.failures.extend(other.failures)
        self.exceptions.extend(other.exceptions)
        self.errors.extend(other.errors)
        self.debug_logs.extend(other.debug_logs)
        return self

    def format(self, debug: bool = False) -> str:
        text = ""
        if debug:
            text += "printing out debug logs from the execution:\n"
            text += _format_items(self.debug_logs)
        if self.is_successful():
            return text + "All tests passed!\n"
        text += "printing out failures:\n"
        text += _format_items(EgressURLError(failure) for failure in self.failures)
        text += "printing out exceptions preventing the verifier from running the specific test:\n"
        text += _format_items(self.exceptions)
        text += "printing out errors faced during the execution:\n"
        text += _format_items(self.errors)
        return text

    def summary(self, debug: bool = False) -> None:
        print("Summary:")
        print(self.format(debug), end="")

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.is_successful(),
            "failures": list(self.failures),
            "exceptions": list(self.exceptions),
            "errors": [str(err) for err in self.errors],
            "debug_logs": list(self.debug_logs),
        }


__all__ = ["Output"]
