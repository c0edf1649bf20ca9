# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""The HttpClient seam used for pod logs and egress list downloads."""

from typing import Protocol

from ..config import HttpSettings
from .models import HttpRequest, HttpResponse


class HttpClient(Protocol):
    def get(self, request: HttpRequest) -> HttpResponse:
        """Fetch ``request.url``; transport faults come back in ``HttpResponse.error``."""
        ...

    def close(self) -> None: ...


def create_default_http_client(settings: HttpSettings | None = None) -> HttpClient:
    from .httpx_client import HttpxClient

    return HttpxClient(settings)
