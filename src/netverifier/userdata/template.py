# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Userdata template expansion.

Templates are cloud-init YAML or shell scripts with shell-style ``$VAR`` and
``${VAR}`` placeholders. A template may declare the variables callers must
supply with a directive line::

    # network-verifier-required-variables=TIMEOUT,DELAY,URLS

Probes additionally reserve variables they fix themselves (the output tokens);
callers may not set those, so the workload always prints exactly the tokens the
probe's parser waits for.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping

from ..errors import ValidationError
from ..utils.duration import duration_to_bare_seconds

REQUIRED_VARIABLES_DIRECTIVE = "network-verifier-required-variables"
MAX_SANE_DURATION_SECONDS = 3 * 60 * 60

_DIRECTIVE_RE = re.compile(
    r"^[ \t]*#[ \t]*" + re.escape(REQUIRED_VARIABLES_DIRECTIVE) + r"[ \t]*=[ \t]*([\w,]+)[ \t]*$",
    re.MULTILINE,
)
# ${NAME}, $NAME, or a shell special parameter ($1, $@, $*, ...)
_VARIABLE_RE = re.compile(r"\$(?:\{([^}]*)\}|([A-Za-z_][A-Za-z0-9_]*)|([*#$@!?\-0-9]))")


def extract_required_variables_directive(template: str) -> tuple[str, list[str]]:
    """
    Split the required-variables directive off ``template``.

    Returns the template with every directive line blanked, plus the variables
    listed in the first directive (empty when there is none).
    """
    match = _DIRECTIVE_RE.search(template)
    if match is None:
        return template, []
    body = _DIRECTIVE_RE.sub("", template)
    required = [name for name in match.group(1).strip().split(",") if name]
    return body, required


def validate_provided_variables(
    supplied: Mapping[str, str],
    reserved: Mapping[str, str],
    required: list[str],
) -> None:
    """
    Raise ValidationError unless ``supplied`` respects ``reserved`` and ``required``.

    Holds when supplied.keys() and reserved.keys() are disjoint and every required
    variable is reserved or supplied with a non-empty value.
    """
    for name in supplied:
        if name in reserved:
            raise ValidationError(f"must not overwrite preset user-data variable {name}")

    for name in required:
        if name in reserved:
            continue
        if not supplied.get(name):
            raise ValidationError(f"must specify non-empty value for required user-data variable {name}")


def expand_variables(template: str, mapping: Mapping[str, str]) -> str:
    """
    Shell-style expansion of ``$NAME`` and ``${NAME}``.

    Unknown names expand to "". A ``$`` that starts no variable is kept as-is.
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name is None:
            name = match.group(2) or match.group(3)
        return str(mapping.get(name, "") or "")

    return _VARIABLE_RE.sub(_replace, template)


def expand_template(raw: str, reserved: Mapping[str, str], supplied: Mapping[str, str]) -> str:
    """Validate ``supplied`` against ``raw``'s directive and ``reserved``, then expand."""
    body, required = extract_required_variables_directive(raw)
    validate_provided_variables(supplied, reserved, required)
    merged = {**supplied, **reserved}
    return expand_variables(body, merged)


def normalize_sane_duration(value: str | None, fmt: str = "%.2f", *, name: str = "duration") -> str:
    """
    Parse ``value`` as seconds and render it with ``fmt``.

    The value must be finite, positive and at most three hours.
    """
    seconds = duration_to_bare_seconds(value)
    if not math.isfinite(seconds) or seconds <= 0:
        raise ValidationError(f"invalid {name} value {value!r} (parsed as {seconds:.2f} sec)")
    if seconds > MAX_SANE_DURATION_SECONDS:
        raise ValidationError(f"{name} value {value!r} (parsed as {seconds:.2f} sec) is too large")
    return fmt % seconds


__all__ = [
    "MAX_SANE_DURATION_SECONDS",
    "REQUIRED_VARIABLES_DIRECTIVE",
    "expand_template",
    "expand_variables",
    "extract_required_variables_directive",
    "normalize_sane_duration",
    "validate_provided_variables",
]
