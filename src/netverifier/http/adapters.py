# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-memory HttpClient for tests and offline runs."""

from __future__ import annotations

from .models import HttpRequest, HttpResponse


class StubHttpClient:
    """
    Serves canned responses by URL. A list is consumed in order and its last
    entry repeats; unknown URLs get a transport error.
    """

    def __init__(self, responses: dict[str, HttpResponse | list[HttpResponse]] | None = None):
        self._responses: dict[str, list[HttpResponse]] = {}
        self.requests: list[HttpRequest] = []
        for url, response in (responses or {}).items():
            self.add(url, response)

    def add(self, url: str, response: HttpResponse | list[HttpResponse]) -> None:
        self._responses[url] = list(response) if isinstance(response, list) else [response]

    def get(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        queue = self._responses.get(request.url)
        if not queue:
            return HttpResponse(url=request.url, error=ConnectionError(f"no stubbed response for {request.url}"))
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def close(self) -> None:
        return None
