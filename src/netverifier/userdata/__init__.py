# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Userdata template engine."""

from .template import (
    MAX_SANE_DURATION_SECONDS,
    expand_template,
    expand_variables,
    extract_required_variables_directive,
    normalize_sane_duration,
    validate_provided_variables,
)

__all__ = [
    "MAX_SANE_DURATION_SECONDS",
    "expand_template",
    "expand_variables",
    "extract_required_variables_directive",
    "normalize_sane_duration",
    "validate_provided_variables",
]
