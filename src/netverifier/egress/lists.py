# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Egress endpoint lists.

Lists are YAML documents of the form::

    endpoints:
      - host: ec2.${AWS_REGION}.amazonaws.com
        ports: [443]
        tlsDisabled: false

``${VAR}`` placeholders are expanded before parsing. Each platform ships a
bundled list; the published copy is preferred when it can be downloaded.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from importlib import resources

import yaml

from ..config import VerifierSettings, load_verifier_settings
from ..errors import EgressListError
from ..http.client import HttpClient
from ..http.models import HttpRequest
from ..http.retry import get_with_retries
from ..models.endpoint import EgressURLs, EndpointSpec
from ..platform import Platform
from ..userdata.template import expand_variables

logger = logging.getLogger(__name__)


def load_endpoints(egress_list_yaml: str, variables: Mapping[str, str] | None = None) -> list[EndpointSpec]:
    """Expand ``${VAR}`` placeholders in ``egress_list_yaml`` and parse its endpoints."""
    expanded = expand_variables(egress_list_yaml, variables or {})
    try:
        document = yaml.safe_load(expanded)
    except yaml.YAMLError as exc:
        raise EgressListError(f"invalid egress list YAML: {exc}") from exc

    if document is None:
        return []
    if not isinstance(document, dict):
        raise EgressListError("egress list must be a mapping with an 'endpoints' key")
    raw_endpoints = document.get("endpoints") or []
    if not isinstance(raw_endpoints, list):
        raise EgressListError("'endpoints' must be a list")

    endpoints: list[EndpointSpec] = []
    for raw in raw_endpoints:
        if not isinstance(raw, dict):
            raise EgressListError(f"endpoint entries must be mappings, got {raw!r}")
        endpoints.append(EndpointSpec.from_mapping(raw))
    return endpoints


def egress_list_to_urls(egress_list_yaml: str, variables: Mapping[str, str] | None = None) -> EgressURLs:
    """Parse a list and split its URLs into TLS and TLS-disabled buckets."""
    return EgressURLs.from_endpoints(load_endpoints(egress_list_yaml, variables))


def get_local_egress_list(platform: Platform | str) -> str:
    """Return the egress list bundled with this package for ``platform``."""
    platform = Platform.parse(platform)
    resource = resources.files(__package__).joinpath("data", f"{platform.value}.yaml")
    try:
        return resource.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise EgressListError(f"no egress list registered for platform '{platform.value}'") from None


def fetch_published_egress_list(
    platform: Platform | str,
    http_client: HttpClient,
    *,
    base_url: str | None = None,
) -> str:
    """Download the published egress list for ``platform``."""
    platform = Platform.parse(platform)
    base = (base_url or load_verifier_settings().egress_list_url).rstrip("/")
    url = f"{base}/{platform.value}.yaml"
    response = get_with_retries(http_client, HttpRequest(url=url))
    if not response.succeeded:
        raise EgressListError(f"failed to fetch egress list from {url}: {response.reason}")
    logger.info("Using egress URL list from %s", url)
    return response.text


@dataclass
class EgressListGenerator:
    """Resolves the URLs to probe for one verification run."""

    platform: Platform
    variables: dict[str, str] = field(default_factory=dict)
    http_client: HttpClient | None = None
    settings: VerifierSettings | None = None

    def generate(self, egress_list_yaml: str = "") -> EgressURLs:
        """
        Return URLs from ``egress_list_yaml`` when given, else from the published
        list, falling back to the bundled one if the download or parse fails.
        """
        if egress_list_yaml:
            return egress_list_to_urls(egress_list_yaml, self.variables)

        if self.http_client is not None:
            settings = self.settings or load_verifier_settings()
            try:
                published = fetch_published_egress_list(
                    self.platform, self.http_client, base_url=settings.egress_list_url
                )
                return egress_list_to_urls(published, self.variables)
            except EgressListError as exc:
                logger.error("Failed to get published egress list, falling back to local list: %s", exc)

        return egress_list_to_urls(get_local_egress_list(self.platform), self.variables)


__all__ = [
    "EgressListGenerator",
    "egress_list_to_urls",
    "fetch_published_egress_list",
    "get_local_egress_list",
    "load_endpoints",
]
