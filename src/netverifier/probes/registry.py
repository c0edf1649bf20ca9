# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Name-based probe lookup."""

from __future__ import annotations

from typing import Any

from ..errors import ValidationError
from .base import Probe, registered_probes

# importing the modules registers their probes
from .curl_json import CurlJSONProbe  # noqa: F401
from .dummy import DummyProbe  # noqa: F401
from .legacy import LegacyProbe  # noqa: F401

DEFAULT_PROBE = "curl"


def available_probes() -> list[str]:
    return sorted(registered_probes())


def get_probe(name: str | None = None, **kwargs: Any) -> Probe:
    """Instantiate the probe registered as ``name`` (case-insensitive)."""
    key = (name or DEFAULT_PROBE).strip().lower()
    probe_cls = registered_probes().get(key)
    if probe_cls is None:
        raise ValidationError(f"unknown probe {name!r}; expected one of: {', '.join(available_probes())}")
    return probe_cls(**kwargs)


__all__ = ["DEFAULT_PROBE", "available_probes", "get_probe"]
