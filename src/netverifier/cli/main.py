# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""network-verifier CLI."""

from __future__ import annotations

import argparse
import base64
import binascii
import json
import sys
from typing import Any

from ..collect.extract import ExtractionState, extract_probe_output
from ..config import load_http_settings, load_verifier_settings
from ..errors import EgressListError, ProbeOutputCorruptedError, ProbeOutputError, ValidationError
from ..http import create_default_http_client
from ..log import setup_logging
from ..models.output import Output
from ..platform import Platform
from ..probes.registry import DEFAULT_PROBE, available_probes, get_probe
from ..runtime import EgressVerifier, ValidateEgressRequest

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def _parse_variable(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {raw!r}")
    return name.strip(), value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="netverifier",
        description="Render egress probe userdata and classify probe output",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging and print debug logs")
    subparsers = parser.add_subparsers(dest="command", required=True)

    userdata = subparsers.add_parser("userdata", help="Print the expanded userdata for a probe")
    userdata.add_argument("--probe", default=DEFAULT_PROBE, choices=available_probes(), help="Probe to render")
    userdata.add_argument(
        "--platform",
        default=Platform.AWS_CLASSIC.value,
        help="Platform whose egress list is probed (aws-classic, aws-hcp, gcp-classic)",
    )
    userdata.add_argument("--egress-list", help="YAML file with the endpoints to probe instead of the default list")
    userdata.add_argument("--region", default="", help="Region substituted for ${AWS_REGION} in the egress list")
    userdata.add_argument("--timeout", help="Per-URL curl timeout, e.g. 5s or 2.5")
    userdata.add_argument("--delay", help="Seconds to wait before probing")
    userdata.add_argument("--no-tls", action="store_true", help="Skip TLS verification for every URL")
    userdata.add_argument("--cacert", help="PEM file with an additional CA bundle to trust")
    userdata.add_argument("--http-proxy", default="", help="HTTP proxy the probe should use")
    userdata.add_argument("--https-proxy", default="", help="HTTPS proxy the probe should use")
    userdata.add_argument("--no-proxy", default="", help="Hosts the probe reaches without a proxy")
    userdata.add_argument("--use-systemd", action="store_true", help="Render a shell script instead of cloud-init")
    userdata.add_argument(
        "--var",
        action="append",
        default=[],
        type=_parse_variable,
        metavar="NAME=VALUE",
        help="Extra template variable (repeatable)",
    )

    parse = subparsers.add_parser("parse", help="Classify captured probe output")
    parse.add_argument("input", nargs="?", default="-", help="File with console/log output ('-' for stdin)")
    parse.add_argument("--probe", default=DEFAULT_PROBE, choices=available_probes(), help="Probe that produced it")
    parse.add_argument("--base64", action="store_true", help="Input is base64-encoded (EC2 console output)")
    parse.add_argument("--ensure-private", action="store_true", help="Also fail endpoints with public addresses")
    parse.add_argument("--json", action="store_true", help="Output JSON instead of the human-friendly summary")
    return parser


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8", errors="replace") as handle:
        return handle.read()


def _print_json(data: dict[str, Any] | Any) -> None:
    payload = data.to_dict() if hasattr(data, "to_dict") else data
    json.dump(payload, sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _run_userdata(args: argparse.Namespace) -> int:
    cacert = ""
    if args.cacert:
        with open(args.cacert, "rb") as handle:
            cacert = base64.b64encode(handle.read()).decode("ascii")

    request = ValidateEgressRequest(
        probe=args.probe,
        platform=args.platform,
        region=args.region,
        timeout=args.timeout,
        delay=args.delay,
        no_tls=args.no_tls,
        egress_list_yaml=_read_text(args.egress_list) if args.egress_list else "",
        cacert=cacert,
        http_proxy=args.http_proxy,
        https_proxy=args.https_proxy,
        no_proxy=args.no_proxy,
        use_systemd=args.use_systemd,
        variables=dict(args.var),
    )

    http_client = None if args.egress_list else create_default_http_client(load_http_settings())
    try:
        verifier = EgressVerifier(http_client=http_client, settings=load_verifier_settings())
        userdata = verifier.build_userdata(request)
    except (ValidationError, EgressListError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_FAILED
    finally:
        if http_client is not None:
            http_client.close()

    sys.stdout.write(userdata)
    if not userdata.endswith("\n"):
        sys.stdout.write("\n")
    return EXIT_OK


def classify_captured_output(raw: str, probe_name: str, *, ensure_private: bool = False) -> Output:
    """Extract and parse one probe's payload from already-captured output."""
    output = Output()
    if probe_name == "curl":
        probe = get_probe(probe_name, ensure_private=ensure_private)
    else:
        probe = get_probe(probe_name)

    extraction = extract_probe_output(raw, probe.get_starting_token(), probe.get_ending_token())
    if extraction.state is ExtractionState.COMPLETE:
        probe.parse_probe_output(extraction.payload, output)
    elif extraction.state is ExtractionState.CORRUPTED:
        output.add_exception(ProbeOutputCorruptedError(f"probe output corrupted: {extraction.reason}"))
    else:
        output.add_exception(ProbeOutputError(f"probe output incomplete ({extraction.state.value})"))
    return output


def _run_parse(args: argparse.Namespace) -> int:
    raw = _read_text(args.input)
    if args.base64:
        try:
            raw = base64.b64decode("".join(raw.split()), validate=True).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError) as exc:
            print(f"error: input is not valid base64: {exc}", file=sys.stderr)
            return EXIT_USAGE

    output = classify_captured_output(raw, args.probe, ensure_private=args.ensure_private)
    if args.json:
        _print_json(output)
    else:
        output.summary(debug=args.debug)
    return EXIT_OK if output.is_successful() else EXIT_FAILED


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging("DEBUG" if args.debug else None)

    if args.command == "userdata":
        return _run_userdata(args)
    return _run_parse(args)


if __name__ == "__main__":
    raise SystemExit(main())
