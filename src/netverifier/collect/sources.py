# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Readers for the places a probe workload prints to.

Each source returns the full captured text seen so far, or None when nothing
is available yet. Cloud SDK calls are injected as plain callables so this
module stays free of provider dependencies.
"""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Callable
from typing import Protocol
from urllib.parse import quote

from ..errors import OutputDecodeError, OutputSourceError, categorize_exception, error_category_to_reason
from ..http.client import HttpClient
from ..http.models import HttpRequest

logger = logging.getLogger(__name__)

# log endpoint answers these while the container is still being created
_POD_NOT_READY_STATUSES = {400, 404}


class OutputSource(Protocol):
    def fetch(self) -> str | None: ...


class ConsoleOutputSource:
    """EC2-style console output, delivered base64-encoded."""

    def __init__(self, get_console_output: Callable[[], str | None]):
        self._get_console_output = get_console_output

    def fetch(self) -> str | None:
        encoded = self._get_console_output()
        if not encoded:
            return None
        try:
            decoded = base64.b64decode("".join(encoded.split()), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise OutputDecodeError(f"console output is not valid base64: {exc}") from exc
        return decoded.decode("utf-8", errors="replace")


class SerialPortOutputSource:
    """GCE-style serial port output, delivered as plain text."""

    def __init__(self, get_serial_port_output: Callable[[], str | None]):
        self._get_serial_port_output = get_serial_port_output

    def fetch(self) -> str | None:
        return self._get_serial_port_output() or None


class PodLogSource:
    """Logs of a probe pod, read from the Kubernetes API."""

    def __init__(
        self,
        http_client: HttpClient,
        api_server: str,
        namespace: str,
        pod: str,
        *,
        container: str | None = None,
        token: str | None = None,
    ):
        self.http_client = http_client
        self.url = (
            f"{api_server.rstrip('/')}/api/v1/namespaces/{quote(namespace, safe='')}/pods/{quote(pod, safe='')}/log"
        )
        self.container = container
        self.token = token

    def fetch(self) -> str | None:
        headers = {"Accept": "text/plain"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        params = {"container": self.container} if self.container else None

        response = self.http_client.get(HttpRequest(url=self.url, headers=headers, params=params))
        if not response.ok:
            hint = error_category_to_reason(categorize_exception(response.error)) if response.error else ""
            raise OutputSourceError(
                f"failed to read pod logs from {self.url}: {hint or response.reason} ({response.reason})"
            )

        if response.status_code in _POD_NOT_READY_STATUSES:
            logger.debug("Pod logs not available yet (HTTP %s)", response.status_code)
            return None
        if not response.succeeded:
            raise OutputSourceError(f"failed to read pod logs from {self.url}: HTTP {response.status_code}")
        return response.text or None


__all__ = ["ConsoleOutputSource", "OutputSource", "PodLogSource", "SerialPortOutputSource"]
