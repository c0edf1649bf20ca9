# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""curl-based probe reporting one JSON object per egress URL."""

from __future__ import annotations

import base64
import binascii
import ipaddress
import json
import logging
from collections.abc import Mapping

import yaml

from ..config import VerifierSettings, load_verifier_settings
from ..egress.curlgen import DEFAULT_CURL_OUTPUT_SEPARATOR, CurlOptions, generate_curl_command
from ..errors import GenericError, ValidationError, categorize_curl_exit_code, error_category_to_reason
from ..models.curl_result import ProbeResult
from ..models.output import Output
from ..userdata.template import expand_template, normalize_sane_duration
from ..utils.text import fix_leading_zeros_in_json, remove_timestamps
from .base import Probe, load_template

logger = logging.getLogger(__name__)

STARTING_TOKEN = "NV_CURLJSON_BEGIN"
ENDING_TOKEN = "NV_CURLJSON_END"
OUTPUT_LINE_PREFIX = DEFAULT_CURL_OUTPUT_SEPARATOR

RESERVED_VARIABLES = {
    "USERDATA_BEGIN": STARTING_TOKEN,
    "USERDATA_END": ENDING_TOKEN,
}

NON_PRIVATE_ENDPOINT_MESSAGE = "The endpoint is non private"

# RFC 1918 and RFC 4193 ranges only; loopback and link-local do not count
_PRIVATE_NETWORKS = tuple(
    ipaddress.ip_network(net) for net in ("10.0.0.0/8", "172.16.0.0/12", "192.168.0.0/16", "fc00::/7")
)


def _is_truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


def is_private_address(address: str) -> bool:
    try:
        ip = ipaddress.ip_address(address.strip())
    except ValueError:
        return False
    return any(ip in network for network in _PRIVATE_NETWORKS if network.version == ip.version)


def render_ca_cert(cacert_b64: str) -> str:
    """Render a base64 PEM bundle as a cloud-init ``ca_certs`` block."""
    try:
        decoded = base64.b64decode(cacert_b64, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise ValidationError(f"failed to base64 decode provided CA certificate: {exc}") from exc
    document = {"ca_certs": {"trusted": [decoded.strip()]}}
    return yaml.safe_dump(document, default_flow_style=False, sort_keys=False).strip()


def deserialize_prefixed_curl_json(line: str) -> ProbeResult:
    """Parse one ``@NV@{...}`` line; raises ValueError when it is not one."""
    stripped = line.strip()
    if not stripped.startswith(OUTPUT_LINE_PREFIX):
        raise ValueError(f"missing prefix '{OUTPUT_LINE_PREFIX}': {line}")
    data = json.loads(stripped[len(OUTPUT_LINE_PREFIX) :])
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return ProbeResult.from_mapping(data)


def bulk_deserialize_prefixed_curl_json(serialized_lines: str) -> tuple[list[ProbeResult], dict[int, Exception]]:
    """
    Deserialize every non-blank line of ``serialized_lines``.

    Returns the parsed results plus a mapping of 1-based line number to the
    error that line raised. A bad line never stops the others from parsing.
    """
    results: list[ProbeResult] = []
    errors: dict[int, Exception] = {}
    for line_num, line in enumerate(serialized_lines.split("\n"), start=1):
        if not line.strip():
            continue
        try:
            results.append(deserialize_prefixed_curl_json(line))
        except ValueError as exc:
            errors[line_num] = exc
    return results, errors


class CurlJSONProbe(Probe, name="curl"):
    """
    Runs curl once over every egress URL and reads back ``%{json}`` per URL.

    With ``ensure_private`` set, a reachable endpoint whose remote address is
    not in a private range is reported as a failure too.
    """

    def __init__(self, ensure_private: bool = False, settings: VerifierSettings | None = None):
        self.ensure_private = ensure_private
        self.settings = settings or load_verifier_settings()

    def get_starting_token(self) -> str:
        return STARTING_TOKEN

    def get_ending_token(self) -> str:
        return ENDING_TOKEN

    def get_expanded_userdata(self, variables: Mapping[str, str]) -> str:
        # USE_SYSTEMD selects a plain shell script for images without cloud-init
        if _is_truthy(variables.get("USE_SYSTEMD")):
            template = load_template("curl_json_systemd.sh")
        else:
            template = load_template("curl_json.yaml")

        values = dict(variables)
        # curl only accepts bare decimal seconds, cloud-init's sleep a whole number
        try:
            values["TIMEOUT"] = normalize_sane_duration(values.get("TIMEOUT"), "%.2f", name="TIMEOUT")
            values["DELAY"] = normalize_sane_duration(values.get("DELAY"), "%.0f", name="DELAY")
        except ValidationError as exc:
            raise ValidationError(f"invalid userdata variable: {exc}") from exc

        options = CurlOptions(
            ca_path=self.settings.ca_path,
            proxy_ca_path=self.settings.proxy_ca_path,
            retry=self.settings.curl_retries,
            max_time=values["TIMEOUT"],
            no_tls=_is_truthy(values.get("NOTLS")),
            urls=values.get("URLS", ""),
            tls_disabled_urls=values.get("TLSDISABLED_URLS", ""),
        )
        values["CURL_COMMAND"] = generate_curl_command(options, OUTPUT_LINE_PREFIX)

        if values.get("CACERT"):
            values["CACERT_RENDERED"] = render_ca_cert(values["CACERT"])

        return expand_template(template, RESERVED_VARIABLES, values)

    def parse_probe_output(self, probe_output: str, output: Output) -> None:
        # EC2 console timestamps and curl's zero-padded ints both break the JSON
        repaired = fix_leading_zeros_in_json(remove_timestamps(probe_output))
        results, errors = bulk_deserialize_prefixed_curl_json(repaired)

        for result in results:
            output.add_debug_logs(repr(result))
            # telnet is how the probe reaches bare TCP ports; report it as such
            url = result.url.replace("telnet", "tcp", 1)
            if not result.is_successful_connection():
                if result.scheme and not result.is_known_scheme:
                    logger.warning("Unrecognized scheme %r for %s, counting it as blocked", result.scheme, url)
                output.set_egress_failures([f"{url} ({result.error_msg})"])
                hint = error_category_to_reason(categorize_curl_exit_code(result.exit_code))
                if hint:
                    output.add_debug_logs(f"{url}: {hint} (curl exit code {result.exit_code})")
            elif self.ensure_private and not is_private_address(result.remote_ip):
                output.set_egress_failures([f"{url} ({NON_PRIVATE_ENDPOINT_MESSAGE})"])

        for line_num, err in errors.items():
            output.add_error(GenericError(f"error processing line {line_num}: {err}"))


__all__ = [
    "CurlJSONProbe",
    "ENDING_TOKEN",
    "OUTPUT_LINE_PREFIX",
    "STARTING_TOKEN",
    "bulk_deserialize_prefixed_curl_json",
    "deserialize_prefixed_curl_json",
    "is_private_address",
    "render_ca_cert",
]
