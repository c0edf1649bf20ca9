# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Typed view of one line of curl ``--write-out '%{json}'`` output."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any

# curl exits with 49 ("malformed telnet option") right after a telnet connection
# is established, because the probe passes a bogus ``-t B`` option on purpose.
TELNET_CONNECTED_EXIT_CODE = 49


def _as_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class ProbeResult:
    """
    Everything curl reported about its attempt(s) to reach one URL.

    Field names follow curl 7.76's JSON keys. Only a handful drive the verdict;
    the rest are kept for debug logs.
    """

    url: str = ""
    scheme: str = ""
    exit_code: int = 0
    error_msg: str = ""
    url_effective: str = ""
    url_num: int = 0
    content_type: str = ""
    filename_effective: str = ""
    ftp_entry_path: str = ""
    http_code: int = 0
    http_connect: int = 0
    http_version: str = ""
    local_ip: str = ""
    local_port: int = 0
    method: str = ""
    num_connects: int = 0
    num_headers: int = 0
    num_redirects: int = 0
    proxy_ssl_verify_result: int = 0
    redirect_url: str = ""
    referer: str = ""
    remote_ip: str = ""
    remote_port: int = 0
    response_code: int = 0
    size_download: int = 0
    size_header: int = 0
    size_request: int = 0
    size_upload: int = 0
    speed_download: int = 0
    speed_upload: int = 0
    ssl_verify_result: int = 0
    time_appconnect: float = 0.0
    time_connect: float = 0.0
    time_namelookup: float = 0.0
    time_pretransfer: float = 0.0
    time_redirect: float = 0.0
    time_starttransfer: float = 0.0
    time_total: float = 0.0
    curl_version: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    # JSON key -> attribute name where they differ
    _RENAMED = {"exitcode": "exit_code", "errormsg": "error_msg", "urlnum": "url_num"}

    def is_successful_connection(self) -> bool:
        """Whether curl reached the URL, judged per protocol from its exit code."""
        if not self.scheme:
            return False

        scheme = self.scheme.upper()
        if "HTTP" in scheme:
            return self.exit_code == 0
        if "TELNET" in scheme:
            return self.exit_code == TELNET_CONNECTED_EXIT_CODE
        return False

    @property
    def is_known_scheme(self) -> bool:
        scheme = self.scheme.upper()
        return "HTTP" in scheme or "TELNET" in scheme

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ProbeResult:
        """Build a result from decoded JSON, tolerating nulls and unknown keys."""
        types = {f.name: f.type for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            name = cls._RENAMED.get(key, key)
            if name == "extra" or name not in types:
                extra[key] = value
                continue
            kind = types[name]
            if kind == "int":
                kwargs[name] = _as_int(value)
            elif kind == "float":
                kwargs[name] = _as_float(value)
            else:
                kwargs[name] = _as_str(value)
        return cls(extra=extra, **kwargs)
