# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Build the curl command a probe workload runs against the egress URLs."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..errors import ValidationError

DEFAULT_CURL_OUTPUT_SEPARATOR = "@NV@"


def _join_urls(urls: str | Sequence[str]) -> str:
    if isinstance(urls, str):
        return " ".join(urls.split())
    return " ".join(url.strip() for url in urls if url and url.strip())


@dataclass
class CurlOptions:
    """
    Flag values for the generated command.

    ``urls`` are reached with certificate verification against ``ca_path``;
    ``tls_disabled_urls`` are reached with ``--insecure``. ``no_tls`` disables
    verification for everything.
    """

    ca_path: str
    proxy_ca_path: str
    retry: int
    max_time: str
    no_tls: bool = False
    urls: str | Sequence[str] = ""
    tls_disabled_urls: str | Sequence[str] = ""


def _write_out(separator: str) -> str:
    # curl prints one JSON object per URL on stderr, prefixed so the lines can be
    # told apart from everything else on the console.
    return f'-w "%{{stderr}}{separator}%{{json}}\\n"'


def generate_curl_command(options: CurlOptions, separator: str = DEFAULT_CURL_OUTPUT_SEPARATOR) -> str:
    """Return a single shell command probing every URL in ``options``."""
    if isinstance(options.retry, bool) or not isinstance(options.retry, int) or options.retry < 0:
        raise ValidationError(f"curl retry count must be a non-negative integer, got {options.retry!r}")
    max_time = str(options.max_time or "").strip()
    if not max_time:
        raise ValidationError("curl max time must not be empty")
    if not separator or any(ch.isspace() or ch == '"' for ch in separator):
        raise ValidationError(f"invalid curl output separator {separator!r}")

    urls = _join_urls(options.urls)
    tls_disabled_urls = _join_urls(options.tls_disabled_urls)

    command = (
        f"curl --capath {options.ca_path} --proxy-capath {options.proxy_ca_path} "
        f"--retry {options.retry} --retry-connrefused -t B -Z -s -I -m {max_time} {_write_out(separator)}"
    )

    if options.no_tls:
        command += " --insecure"
        urls = " ".join(part for part in (urls, tls_disabled_urls) if part)
        tls_disabled_urls = ""

    if urls:
        command += f" {urls}"
    command += " --proto =http,https,telnet"

    if tls_disabled_urls:
        # Options do not survive --next, so everything is repeated.
        command += (
            f" --next --insecure --retry {options.retry} --retry-connrefused -s -I -m {max_time} "
            f"{_write_out(separator)} {tls_disabled_urls} --proto =http,https,telnet"
        )

    return command


__all__ = ["CurlOptions", "DEFAULT_CURL_OUTPUT_SEPARATOR", "generate_curl_command"]
