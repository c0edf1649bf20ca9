# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Egress probes."""

from .base import PROBE_OPERATIONS, Probe, load_template, registered_probes
from .curl_json import CurlJSONProbe
from .dummy import DummyProbe
from .legacy import LegacyProbe
from .registry import DEFAULT_PROBE, available_probes, get_probe

__all__ = [
    "CurlJSONProbe",
    "DEFAULT_PROBE",
    "DummyProbe",
    "LegacyProbe",
    "PROBE_OPERATIONS",
    "Probe",
    "available_probes",
    "get_probe",
    "load_template",
    "registered_probes",
]
