# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Deprecated probe driving the old validator container image.

Its output is free-form text, so verdicts are scraped with regular expressions.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from ..errors import ValidationError
from ..models.output import Output
from ..userdata.template import expand_template, normalize_sane_duration
from .base import Probe, load_template

STARTING_TOKEN = "USERDATA BEGIN"
ENDING_TOKEN = "USERDATA END"

# The validator image printed its own start/end markers inside the userdata
# markers; parsing wants the whole userdata output, so the outer pair is used.
RESERVED_VARIABLES = {
    "USERDATA_BEGIN": STARTING_TOKEN,
    "USERDATA_END": ENDING_TOKEN,
    "VALIDATOR_START_VERIFIER": "VALIDATOR START",
    "VALIDATOR_END_VERIFIER": "VALIDATOR END",
    # lets the template reference a plain shell variable that expansion would eat
    "IMAGE": "$IMAGE",
}

SUCCESS_RE = re.compile(r"Success!")
GENERIC_FAILURE_RE = re.compile(r"(?m)^(.*Cannot.*)|(.*Could not.*)|(.*Failed.*)|(.*command not found.*)")
RETRY_ATTEMPT_RE = re.compile(r"Failed, retrying in")
EGRESS_FAILURE_RE = re.compile(r"Unable to reach (\S+)")

GENERIC_ERROR_DEBUG_MESSAGE = (
    "generic error found - please help us classify this by sharing it with us "
    "so that we can provide a more specific error message"
)


def record_generic_errors(console_output: str, output: Output) -> bool:
    """
    Record unclassified failure lines as errors; returns whether any were found.

    A match is forgiven only when the retry marker sits in the matched text
    itself. Retry chatter printed on a separate line from the failure it
    belongs to is still reported.
    """
    found = False
    for match in GENERIC_FAILURE_RE.finditer(console_output):
        failure = match.group(0)
        if RETRY_ATTEMPT_RE.search(failure):
            output.add_debug_logs(f"ignoring failure that is retrying: {failure}")
            continue
        output.add_error(failure)
        found = True
    return found


def record_egress_failures(probe_output: str, output: Output) -> bool:
    """Record every ``Unable to reach <target>`` as a failure; returns whether any were found."""
    targets = EGRESS_FAILURE_RE.findall(probe_output)
    output.set_egress_failures(targets)
    return bool(targets)


class LegacyProbe(Probe, name="legacy"):
    def get_starting_token(self) -> str:
        return STARTING_TOKEN

    def get_ending_token(self) -> str:
        return ENDING_TOKEN

    def get_expanded_userdata(self, variables: Mapping[str, str]) -> str:
        values = dict(variables)
        if "TIMEOUT" in values:
            # the validator takes a Go duration
            try:
                values["TIMEOUT"] = normalize_sane_duration(values["TIMEOUT"], "%.2fs", name="TIMEOUT")
            except ValidationError as exc:
                raise ValidationError(f"invalid userdata variable: {exc}") from exc
        return expand_template(load_template("legacy.yaml"), RESERVED_VARIABLES, values)

    def parse_probe_output(self, probe_output: str, output: Output) -> None:
        if SUCCESS_RE.search(probe_output):
            return

        if record_generic_errors(probe_output, output):
            output.add_debug_logs(GENERIC_ERROR_DEBUG_MESSAGE)

        if record_egress_failures(probe_output, output):
            output.add_debug_logs("egress failures found")


__all__ = [
    "ENDING_TOKEN",
    "LegacyProbe",
    "STARTING_TOKEN",
    "record_egress_failures",
    "record_generic_errors",
]
