# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HttpClient backed by a synchronous httpx.Client."""

from __future__ import annotations

import logging

import httpx

from ..config import HttpSettings, load_http_settings
from .models import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)


def _read_capped(response: httpx.Response, limit: int) -> tuple[bytes, bool]:
    """Read at most ``limit`` body bytes; report whether anything was dropped."""
    body = bytearray()
    for chunk in response.iter_bytes():
        room = limit - len(body)
        if len(chunk) > room:
            body.extend(chunk[:room])
            return bytes(body), True
        body.extend(chunk)
    return bytes(body), False


class HttpxClient:
    """
    Follows redirects (raw.githubusercontent.com serves the published lists
    behind them) and caps bodies at ``HttpSettings.max_body_bytes`` since a
    long-running pod can produce a very large log.
    """

    def __init__(self, settings: HttpSettings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_http_settings()
        self._client = client or httpx.Client(
            follow_redirects=True,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )
        self._client.headers["User-Agent"] = self.settings.user_agent

    def get(self, request: HttpRequest) -> HttpResponse:
        timeout = self.settings.timeout if request.timeout is None else request.timeout
        try:
            with self._client.stream(
                "GET", request.url, params=request.params, headers=request.headers, timeout=timeout
            ) as resp:
                body, truncated = _read_capped(resp, self.settings.max_body_bytes)
                encoding = resp.encoding or "utf-8"
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug("GET %s failed: %r", request.url, exc)
            return HttpResponse(url=request.url, error=exc)

        if truncated:
            logger.warning("Response from %s exceeded %d bytes and was truncated", request.url, len(body))
        try:
            text = body.decode(encoding, errors="replace")
        except LookupError:
            text = body.decode("utf-8", errors="replace")
        return HttpResponse(status_code=resp.status_code, text=text, url=str(resp.url), truncated=truncated)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpxClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
