# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Egress endpoint models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..errors import EgressListError


def port_scheme(port: int) -> str:
    """URL scheme curl should use for a port; non-HTTP(S) ports use the telnet trick."""
    if port == 80:
        return "http"
    if port == 443:
        return "https"
    return "telnet"


@dataclass(frozen=True)
class EndpointSpec:
    host: str
    ports: tuple[int, ...] = ()
    tls_disabled: bool = False

    def urls(self) -> list[str]:
        return [f"{port_scheme(port)}://{self.host}:{port}" for port in self.ports]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> EndpointSpec:
        host = data.get("host")
        if not isinstance(host, str) or not host.strip():
            raise EgressListError(f"endpoint is missing a host: {dict(data)!r}")
        raw_ports = data.get("ports") or []
        if not isinstance(raw_ports, list):
            raise EgressListError(f"ports for {host} must be a list, got {raw_ports!r}")
        ports: list[int] = []
        for port in raw_ports:
            if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
                raise EgressListError(f"invalid port {port!r} for {host}")
            ports.append(port)
        return cls(host=host.strip(), ports=tuple(ports), tls_disabled=bool(data.get("tlsDisabled", False)))


@dataclass
class EgressURLs:
    """Endpoint URLs split by TLS policy, in list order."""

    tls: list[str] = field(default_factory=list)
    tls_disabled: list[str] = field(default_factory=list)

    @classmethod
    def from_endpoints(cls, endpoints: list[EndpointSpec]) -> EgressURLs:
        result = cls()
        for endpoint in endpoints:
            bucket = result.tls_disabled if endpoint.tls_disabled else result.tls
            bucket.extend(endpoint.urls())
        return result

    def __len__(self) -> int:
        return len(self.tls) + len(self.tls_disabled)
