# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from enum import Enum

import httpx


class VerifierError(Exception):
    """Base class for every error raised by network-verifier."""


class ValidationError(VerifierError):
    """Invalid caller input for userdata expansion or command generation."""


class EgressListError(VerifierError):
    """An endpoint list could not be loaded or parsed."""


class OutputSourceError(VerifierError):
    """The execution substrate could not be read."""


class OutputDecodeError(OutputSourceError):
    """Substrate output arrived but could not be decoded (usually transient)."""


class ProbeOutputError(VerifierError):
    """Probe output could not be collected; the run is inconclusive."""


class ProbeOutputCorruptedError(ProbeOutputError):
    pass


class ProbeOutputTimeoutError(ProbeOutputError):
    pass


class ProbeOutputCancelledError(ProbeOutputError):
    pass


class EgressURLError(VerifierError):
    """A single egress endpoint was found to be unreachable."""

    def __init__(self, failure: str):
        self.egress_url = failure
        super().__init__(f"egressURL error: {failure}")


class GenericError(VerifierError):
    """Wrapper for unhandled errors surfaced in an Output."""

    def __init__(self, err: BaseException | str):
        self.cause = err if isinstance(err, BaseException) else None
        super().__init__(f"generic(unhandled) error: {err}")


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    PROXY_ERROR = "PROXY_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


# curl exit codes, see curl(1) "EXIT CODES"
_CURL_EXIT_CATEGORIES: dict[int, ErrorCategory] = {
    0: ErrorCategory.NONE,
    # telnet option syntax error, raised on purpose after a successful TCP connect
    49: ErrorCategory.NONE,
    5: ErrorCategory.PROXY_ERROR,
    97: ErrorCategory.PROXY_ERROR,
    6: ErrorCategory.DNS_ERROR,
    7: ErrorCategory.CONNECTION_ERROR,
    52: ErrorCategory.CONNECTION_ERROR,
    55: ErrorCategory.CONNECTION_ERROR,
    56: ErrorCategory.CONNECTION_ERROR,
    28: ErrorCategory.TIMEOUT,
    35: ErrorCategory.SSL_ERROR,
    51: ErrorCategory.SSL_ERROR,
    53: ErrorCategory.SSL_ERROR,
    54: ErrorCategory.SSL_ERROR,
    58: ErrorCategory.SSL_ERROR,
    59: ErrorCategory.SSL_ERROR,
    60: ErrorCategory.SSL_ERROR,
    77: ErrorCategory.SSL_ERROR,
    80: ErrorCategory.SSL_ERROR,
    82: ErrorCategory.SSL_ERROR,
    83: ErrorCategory.SSL_ERROR,
    90: ErrorCategory.SSL_ERROR,
    91: ErrorCategory.SSL_ERROR,
}


def categorize_curl_exit_code(exit_code: int | None) -> ErrorCategory:
    """Map a curl exit code to an ErrorCategory."""
    if exit_code is None:
        return ErrorCategory.UNKNOWN_ERROR
    return _CURL_EXIT_CATEGORIES.get(exit_code, ErrorCategory.UNKNOWN_ERROR)


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions raised while talking to a substrate to ErrorCategory.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, httpx.ProxyError):
        return ErrorCategory.PROXY_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, TimeoutError):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Connection timed out",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.PROXY_ERROR: "Proxy connectivity issue",
        ErrorCategory.UNKNOWN_ERROR: "Unclassified network error",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Unclassified network error")
