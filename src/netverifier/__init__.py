# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
network-verifier package entrypoint.

Verifies that a network allows egress to the endpoints a cluster needs. A
probe renders userdata for a disposable workload, the workload reaches every
endpoint and prints a tokenized report, and the report is read back and
classified into failures, exceptions and errors. Cloud and Kubernetes
plumbing is injected through small protocols; HTTP goes through an injectable
client interface.
"""

from .collect import (
    ConsoleOutputSource,
    OutputSource,
    PodLogSource,
    SerialPortOutputSource,
    extract_probe_output,
    poll_probe_output,
)
from .config import HttpSettings, VerifierSettings, load_http_settings, load_verifier_settings
from .egress import CurlOptions, EgressListGenerator, generate_curl_command
from .errors import EgressURLError, GenericError, ValidationError, VerifierError
from .http import HttpClient, HttpRequest, HttpResponse, HttpxClient, create_default_http_client
from .log import setup_logging
from .models import EgressURLs, EndpointSpec, Output, ProbeResult
from .platform import Platform
from .probes import CurlJSONProbe, DummyProbe, LegacyProbe, Probe, available_probes, get_probe
from .runtime import EgressVerifier, ValidateEgressRequest, Workload, verify_many
from .version import __version__

__all__ = [
    "ConsoleOutputSource",
    "CurlJSONProbe",
    "CurlOptions",
    "DummyProbe",
    "EgressListGenerator",
    "EgressURLError",
    "EgressURLs",
    "EgressVerifier",
    "EndpointSpec",
    "GenericError",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "LegacyProbe",
    "Output",
    "OutputSource",
    "Platform",
    "PodLogSource",
    "Probe",
    "ProbeResult",
    "SerialPortOutputSource",
    "ValidateEgressRequest",
    "ValidationError",
    "VerifierError",
    "VerifierSettings",
    "Workload",
    "available_probes",
    "create_default_http_client",
    "extract_probe_output",
    "generate_curl_command",
    "get_probe",
    "load_http_settings",
    "load_verifier_settings",
    "poll_probe_output",
    "setup_logging",
    "verify_many",
    "__version__",
]
