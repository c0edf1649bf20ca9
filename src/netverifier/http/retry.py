# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Retrying GETs for resources that may be briefly unavailable."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..config import load_http_settings
from .client import HttpClient
from .models import HttpRequest, HttpResponse, RetryPolicy

logger = logging.getLogger(__name__)


def default_retry_policy() -> RetryPolicy:
    return RetryPolicy.from_settings(load_http_settings())


def get_with_retries(
    client: HttpClient,
    request: HttpRequest,
    *,
    policy: RetryPolicy | None = None,
    sleep: Callable[[float], None] | None = None,
) -> HttpResponse:
    """
    GET ``request`` until it yields a non-retryable response or the policy runs
    out of attempts. The last response is returned with ``attempts`` filled in.
    """
    policy = policy or default_retry_policy()
    delays = policy.delays()
    attempt = 1
    while True:
        response = client.get(request)
        response.attempts = attempt
        if not policy.should_retry(response):
            return response
        delay = next(delays, None)
        if delay is None:
            return response
        logger.debug("GET %s: %s, retrying in %.1fs", request.url, response.reason, delay)
        (sleep or time.sleep)(delay)
        attempt += 1
