# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request/response records exchanged with an HttpClient."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from ..config import HttpSettings

Headers = dict[str, str]

# Statuses worth another attempt: rate limiting and transient upstream faults.
RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


@dataclass(frozen=True)
class HttpRequest:
    """A GET of one resource (pod logs, a published egress list)."""

    url: str
    params: dict[str, str] | None = None
    headers: Headers | None = None
    timeout: float | None = None


@dataclass
class HttpResponse:
    """
    What came back for an HttpRequest.

    Transport failures never raise out of a client; they are returned with
    ``error`` set and no ``status_code``.
    """

    status_code: int | None = None
    text: str = ""
    url: str | None = None
    error: Exception | None = None
    truncated: bool = False
    attempts: int = 1

    @property
    def ok(self) -> bool:
        """A response was received, whatever its status."""
        return self.error is None and self.status_code is not None

    @property
    def succeeded(self) -> bool:
        return self.ok and 200 <= self.status_code < 300

    @property
    def reason(self) -> str:
        if self.error is not None:
            return str(self.error) or type(self.error).__name__
        if self.status_code is None:
            return "no response"
        return f"HTTP {self.status_code}"


@dataclass
class RetryPolicy:
    attempts: int = 2
    initial_delay: float = 1.0
    backoff_factor: float = 2.0
    retry_statuses: frozenset[int] = field(default=RETRYABLE_STATUSES)

    @classmethod
    def from_settings(cls, settings: HttpSettings) -> RetryPolicy:
        return cls(
            attempts=max(1, settings.max_retries),
            initial_delay=max(0.0, settings.initial_delay),
            backoff_factor=max(1.0, settings.backoff_factor),
        )

    def should_retry(self, response: HttpResponse) -> bool:
        if response.error is not None or response.status_code is None:
            return True
        return response.status_code in self.retry_statuses

    def delays(self) -> Iterator[float]:
        """Waits between consecutive attempts (one fewer than ``attempts``)."""
        delay = self.initial_delay
        for _ in range(self.attempts - 1):
            yield delay
            delay *= self.backoff_factor
