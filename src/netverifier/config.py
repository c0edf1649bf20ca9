# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for network-verifier."""

import math
import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"network-verifier/{__version__}"
DEFAULT_CA_PATH = "/etc/pki/tls/certs/"
DEFAULT_EGRESS_LIST_URL = "https://raw.githubusercontent.com/openshift/osd-network-verifier/main/pkg/data/egress_lists"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        parsed = float(value) if value is not None else default
    except ValueError:
        return default
    return parsed if math.isfinite(parsed) else default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


@dataclass
class HttpSettings:
    """HTTP client defaults (pod log reads, egress list downloads)."""

    timeout: float = 10.0
    max_retries: int = 2
    backoff_factor: float = 2.0
    initial_delay: float = 1.0
    user_agent: str = DEFAULT_USER_AGENT
    verify_ssl: bool = True
    max_body_bytes: int = 16 * 1024 * 1024

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_body_bytes = _int_env("NETVERIFIER_HTTP_MAX_BODY_BYTES", cls.max_body_bytes)
        if max_body_bytes <= 0:
            max_body_bytes = cls.max_body_bytes
        return cls(
            timeout=_float_env("NETVERIFIER_HTTP_TIMEOUT", cls.timeout),
            max_retries=_int_env("NETVERIFIER_HTTP_RETRIES", cls.max_retries),
            backoff_factor=_float_env("NETVERIFIER_HTTP_BACKOFF", cls.backoff_factor),
            initial_delay=_float_env("NETVERIFIER_HTTP_INITIAL_DELAY", cls.initial_delay),
            user_agent=os.getenv("NETVERIFIER_USER_AGENT", cls.user_agent),
            verify_ssl=_bool_env("NETVERIFIER_HTTP_VERIFY_SSL", cls.verify_ssl),
            max_body_bytes=max_body_bytes,
        )


@dataclass
class VerifierSettings:
    """Defaults for a single egress verification run."""

    poll_interval: float = 30.0
    poll_timeout: float = 240.0
    curl_timeout: str = "5s"
    curl_retries: int = 3
    delay: str = "5"
    ca_path: str = DEFAULT_CA_PATH
    proxy_ca_path: str = DEFAULT_CA_PATH
    egress_list_url: str = DEFAULT_EGRESS_LIST_URL
    max_userdata_bytes: int = 16 * 1024

    @classmethod
    def from_env(cls) -> "VerifierSettings":
        """Create settings from environment variables (evaluated at call time)."""
        poll_interval = _float_env("NETVERIFIER_POLL_INTERVAL", cls.poll_interval)
        if poll_interval < 0:
            poll_interval = cls.poll_interval
        poll_timeout = _float_env("NETVERIFIER_POLL_TIMEOUT", cls.poll_timeout)
        if poll_timeout <= 0:
            poll_timeout = cls.poll_timeout
        curl_retries = _int_env("NETVERIFIER_CURL_RETRIES", cls.curl_retries)
        if curl_retries < 0:
            curl_retries = cls.curl_retries
        max_userdata_bytes = _int_env("NETVERIFIER_MAX_USERDATA_BYTES", cls.max_userdata_bytes)
        if max_userdata_bytes <= 0:
            max_userdata_bytes = cls.max_userdata_bytes
        return cls(
            poll_interval=poll_interval,
            poll_timeout=poll_timeout,
            curl_timeout=_str_env("NETVERIFIER_CURL_TIMEOUT", cls.curl_timeout),
            curl_retries=curl_retries,
            delay=_str_env("NETVERIFIER_DELAY", cls.delay),
            ca_path=_str_env("NETVERIFIER_CA_PATH", cls.ca_path),
            proxy_ca_path=_str_env("NETVERIFIER_PROXY_CA_PATH", cls.proxy_ca_path),
            egress_list_url=_str_env("NETVERIFIER_EGRESS_LIST_URL", cls.egress_list_url).rstrip("/"),
            max_userdata_bytes=max_userdata_bytes,
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()


def load_verifier_settings() -> VerifierSettings:
    """Load verifier settings from environment with sensible defaults."""
    return VerifierSettings.from_env()
