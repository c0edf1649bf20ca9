# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Egress URL lists and the curl command built from them."""

from .curlgen import DEFAULT_CURL_OUTPUT_SEPARATOR, CurlOptions, generate_curl_command
from .lists import (
    EgressListGenerator,
    egress_list_to_urls,
    fetch_published_egress_list,
    get_local_egress_list,
    load_endpoints,
)

__all__ = [
    "DEFAULT_CURL_OUTPUT_SEPARATOR",
    "CurlOptions",
    "EgressListGenerator",
    "egress_list_to_urls",
    "fetch_published_egress_list",
    "generate_curl_command",
    "get_local_egress_list",
    "load_endpoints",
]
