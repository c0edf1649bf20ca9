# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP access to the Kubernetes API and published egress lists."""

from .adapters import StubHttpClient
from .client import HttpClient, create_default_http_client
from .httpx_client import HttpxClient
from .models import RETRYABLE_STATUSES, Headers, HttpRequest, HttpResponse, RetryPolicy
from .retry import default_retry_policy, get_with_retries

__all__ = [
    "Headers",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpxClient",
    "RETRYABLE_STATUSES",
    "RetryPolicy",
    "StubHttpClient",
    "create_default_http_client",
    "default_retry_policy",
    "get_with_retries",
]
