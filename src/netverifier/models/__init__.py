# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Result and endpoint models."""

from .curl_result import TELNET_CONNECTED_EXIT_CODE, ProbeResult
from .endpoint import EgressURLs, EndpointSpec, port_scheme
from .output import Output

__all__ = [
    "EgressURLs",
    "EndpointSpec",
    "Output",
    "ProbeResult",
    "TELNET_CONNECTED_EXIT_CODE",
    "port_scheme",
]
