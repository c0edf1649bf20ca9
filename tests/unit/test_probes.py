# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import base64
import json

import pytest
import yaml

from netverifier.config import VerifierSettings
from netverifier.errors import GenericError, ValidationError
from netverifier.models import Output
from netverifier.probes import (
    CurlJSONProbe,
    DummyProbe,
    LegacyProbe,
    Probe,
    available_probes,
    get_probe,
    registered_probes,
)
from netverifier.probes.curl_json import bulk_deserialize_prefixed_curl_json, is_private_address

PEM = "-----BEGIN CERTIFICATE-----\nMIIBfake\n-----END CERTIFICATE-----\n"


def _line(**fields):
    return "@NV@" + json.dumps(fields)


def _curl_variables(**overrides):
    values = {"TIMEOUT": "3s", "DELAY": "5", "URLS": "https://x.com:443", "TLSDISABLED_URLS": ""}
    values.update(overrides)
    return values


def test_registry_lists_builtin_probes():
    assert available_probes() == ["curl", "dummy", "legacy"]
    assert isinstance(get_probe(), CurlJSONProbe)
    assert isinstance(get_probe(" Legacy "), LegacyProbe)
    assert isinstance(get_probe("curl", ensure_private=True), CurlJSONProbe)


def test_registry_rejects_unknown_probe():
    with pytest.raises(ValidationError, match="unknown probe"):
        get_probe("nmap")


def test_incomplete_probe_cannot_register():
    with pytest.raises(TypeError, match="parse_probe_output"):

        class HalfProbe(Probe, name="half"):
            def get_starting_token(self):
                return "A"

            def get_ending_token(self):
                return "B"

            def get_expanded_userdata(self, variables):
                return ""

    assert "half" not in registered_probes()


def test_complete_probe_registers_and_resolves(monkeypatch):
    from netverifier.probes import base

    monkeypatch.setattr(base, "_REGISTRY", dict(base._REGISTRY))

    class EchoProbe(Probe, name="echo"):
        def get_starting_token(self):
            return "ECHO_START"

        def get_ending_token(self):
            return "ECHO_END"

        def get_expanded_userdata(self, variables):
            return "#!/bin/sh\necho ECHO_START ECHO_END\n"

        def parse_probe_output(self, probe_output, output):
            output.add_debug_logs(probe_output)

    assert registered_probes()["echo"] is EchoProbe
    assert EchoProbe.name == "echo"
    assert isinstance(get_probe("ECHO"), EchoProbe)
    assert repr(get_probe("echo")) == "EchoProbe(name='echo')"


def test_builtin_probes_are_concrete():
    for probe_cls in (CurlJSONProbe, LegacyProbe, DummyProbe):
        assert not getattr(probe_cls, "__abstractmethods__", None)
        assert registered_probes()[probe_cls.name] is probe_cls


def test_tokens():
    assert (CurlJSONProbe().get_starting_token(), CurlJSONProbe().get_ending_token()) == (
        "NV_CURLJSON_BEGIN",
        "NV_CURLJSON_END",
    )
    assert (LegacyProbe().get_starting_token(), LegacyProbe().get_ending_token()) == ("USERDATA BEGIN", "USERDATA END")
    assert (DummyProbe().get_starting_token(), DummyProbe().get_ending_token()) == ("DUMMY_START", "DUMMY_END")


def test_curl_parse_success_scenario():
    output = Output()
    payload = "\n" + _line(scheme="HTTPS", exitcode=0, url="https://x.com:443", errormsg=None) + "\n"
    CurlJSONProbe().parse_probe_output(payload, output)
    assert output.is_successful()
    assert output.failures == []
    assert len(output.debug_logs) == 1


def test_curl_parse_tls_failure_scenario():
    output = Output()
    message = "SSL certificate problem: unable to get local issuer certificate"
    CurlJSONProbe().parse_probe_output(
        _line(scheme="HTTPS", exitcode=60, url="https://x.com:443", errormsg=message), output
    )
    assert output.failures == [f"https://x.com:443 ({message})"]
    assert output.exceptions == []
    assert output.errors == []
    assert "https://x.com:443: TLS/certificate issue (curl exit code 60)" in output.debug_logs


def test_curl_parse_failure_hint_per_exit_code():
    output = Output()
    payload = "\n".join(
        [
            _line(scheme="HTTPS", exitcode=6, url="https://nx.example:443", errormsg="Could not resolve host"),
            _line(scheme="TELNET", exitcode=28, url="telnet://db.example:5432", errormsg="Connection timed out"),
            _line(scheme="HTTPS", exitcode=0, url="https://ok.example:443", errormsg=None),
        ]
    )
    CurlJSONProbe().parse_probe_output(payload, output)
    assert output.failures == [
        "https://nx.example:443 (Could not resolve host)",
        "tcp://db.example:5432 (Connection timed out)",
    ]
    hints = [log for log in output.debug_logs if "curl exit code" in log]
    assert hints == [
        "https://nx.example:443: DNS resolution failure (curl exit code 6)",
        "tcp://db.example:5432: Connection timed out (curl exit code 28)",
    ]


def test_curl_parse_telnet_is_reported_as_tcp():
    output = Output()
    payload = "\n".join(
        [
            _line(scheme="TELNET", exitcode=49, url="telnet://logs.example:9997", errormsg="telnet option"),
            _line(scheme="TELNET", exitcode=28, url="telnet://sftp.example:22", errormsg="timed out"),
        ]
    )
    CurlJSONProbe().parse_probe_output(payload, output)
    assert output.failures == ["tcp://sftp.example:22 (timed out)"]


def test_curl_parse_missing_scheme_and_unknown_scheme_fail():
    output = Output()
    payload = "\n".join(
        [
            _line(scheme=None, exitcode=6, url="https://nowhere.example:443", errormsg="Could not resolve host"),
            _line(scheme="FTP", exitcode=0, url="ftp://odd.example:21", errormsg=""),
        ]
    )
    CurlJSONProbe().parse_probe_output(payload, output)
    assert output.failures == [
        "https://nowhere.example:443 (Could not resolve host)",
        "ftp://odd.example:21 ()",
    ]


def test_curl_parse_tolerates_malformed_lines():
    output = Output()
    payload = "\n".join(
        [
            "kernel: something unrelated",
            "@NV@{not json",
            _line(scheme="HTTPS", exitcode=7, url="https://y.com:443", errormsg="Connection refused"),
        ]
    )
    CurlJSONProbe().parse_probe_output(payload, output)
    assert output.failures == ["https://y.com:443 (Connection refused)"]
    assert len(output.errors) == 2
    assert all(isinstance(err, GenericError) for err in output.errors)
    assert "error processing line 1: missing prefix '@NV@'" in str(output.errors[0])
    assert "error processing line 2" in str(output.errors[1])


def test_curl_parse_repairs_timestamps_and_leading_zeros():
    output = Output()
    raw = '@NV@{"scheme":"HTTPS","exitcode":0,"http_code":000,[2024-05-06T07:08:09.123]"url":"https://x.com:443"}'
    CurlJSONProbe().parse_probe_output(raw, output)
    assert output.is_successful()


def test_bulk_deserialize_skips_blank_lines():
    results, errors = bulk_deserialize_prefixed_curl_json("\n\n" + _line(scheme="HTTPS", exitcode=0, url="u") + "\n  \n")
    assert len(results) == 1
    assert errors == {}


def test_bulk_deserialize_rejects_non_object_json():
    results, errors = bulk_deserialize_prefixed_curl_json("@NV@[1, 2]")
    assert results == []
    assert "expected a JSON object" in str(errors[1])


def test_curl_parse_ensure_private():
    payload = "\n".join(
        [
            _line(scheme="HTTPS", exitcode=0, url="https://private.example:443", remote_ip="10.1.2.3"),
            _line(scheme="HTTPS", exitcode=0, url="https://public.example:443", remote_ip="52.1.2.3"),
        ]
    )
    relaxed = Output()
    CurlJSONProbe().parse_probe_output(payload, relaxed)
    assert relaxed.is_successful()

    strict = Output()
    CurlJSONProbe(ensure_private=True).parse_probe_output(payload, strict)
    assert strict.failures == ["https://public.example:443 (The endpoint is non private)"]


@pytest.mark.parametrize(
    ("address", "expected"),
    [
        ("10.0.0.1", True),
        ("172.16.5.4", True),
        ("192.168.1.1", True),
        ("fd00::1", True),
        ("127.0.0.1", False),
        ("8.8.8.8", False),
        ("", False),
        ("not-an-ip", False),
    ],
)
def test_is_private_address(address, expected):
    assert is_private_address(address) is expected


def test_curl_userdata_expansion():
    settings = VerifierSettings(curl_retries=2, ca_path="/ca/", proxy_ca_path="/proxy-ca/")
    userdata = CurlJSONProbe(settings=settings).get_expanded_userdata(
        _curl_variables(TLSDISABLED_URLS="https://insecure.example:443", HTTP_PROXY="http://proxy:3128")
    )

    document = yaml.safe_load(userdata)
    script = document["runcmd"][0]
    assert 'echo "NV_CURLJSON_BEGIN" > /dev/ttyS0' in script
    assert 'echo "NV_CURLJSON_END" > /dev/ttyS0' in script
    assert "sleep 5\n" in script
    assert "curl --capath /ca/ --proxy-capath /proxy-ca/ --retry 2" in script
    assert "-m 3.00" in script
    assert "https://x.com:443 --proto =http,https,telnet --next --insecure" in script
    assert "https://insecure.example:443 --proto =http,https,telnet" in script
    assert 'HTTP_PROXY="http://proxy:3128"' in document["write_files"][0]["content"]
    assert "network-verifier-required-variables" not in userdata
    assert "ca_certs" not in document


def test_curl_userdata_does_not_mutate_input():
    variables = _curl_variables()
    CurlJSONProbe().get_expanded_userdata(variables)
    assert variables == _curl_variables()


def test_curl_userdata_no_tls_merges_urls():
    userdata = CurlJSONProbe().get_expanded_userdata(
        _curl_variables(NOTLS="true", TLSDISABLED_URLS="https://insecure.example:443")
    )
    assert "--insecure https://x.com:443 https://insecure.example:443 --proto =http,https,telnet" in userdata
    assert "--next" not in userdata


def test_curl_userdata_renders_cacert():
    cacert = base64.b64encode(PEM.encode()).decode()
    userdata = CurlJSONProbe().get_expanded_userdata(_curl_variables(CACERT=cacert))
    document = yaml.safe_load(userdata)
    assert document["ca_certs"]["trusted"] == [PEM.strip()]


def test_curl_userdata_rejects_bad_cacert():
    with pytest.raises(ValidationError, match="base64"):
        CurlJSONProbe().get_expanded_userdata(_curl_variables(CACERT="%%%not base64%%%"))


def test_curl_userdata_systemd_variant():
    userdata = CurlJSONProbe().get_expanded_userdata(_curl_variables(USE_SYSTEMD="true"))
    assert userdata.startswith("#!/bin/sh")
    assert "ExecStartPre=/bin/sleep 5" in userdata
    assert 'echo "NV_CURLJSON_BEGIN" > /dev/ttyS0' in userdata


@pytest.mark.parametrize(
    "overrides",
    [
        {"TIMEOUT": "0"},
        {"TIMEOUT": "5h"},
        {"TIMEOUT": ""},
        {"DELAY": "-1"},
        {"DELAY": "nope"},
    ],
)
def test_curl_userdata_rejects_insane_durations(overrides):
    with pytest.raises(ValidationError):
        CurlJSONProbe().get_expanded_userdata(_curl_variables(**overrides))


def test_curl_userdata_rejects_reserved_variable():
    with pytest.raises(ValidationError, match="USERDATA_BEGIN"):
        CurlJSONProbe().get_expanded_userdata(_curl_variables(USERDATA_BEGIN="spoofed"))


def test_curl_userdata_missing_required_variables():
    with pytest.raises(ValidationError):
        CurlJSONProbe().get_expanded_userdata({})


def test_legacy_parse_success_short_circuits():
    output = Output()
    LegacyProbe().parse_probe_output("Failed to do a thing\nUnable to reach x.com:443\nSuccess!", output)
    assert output.is_successful()
    assert output.debug_logs == []


def test_legacy_parse_egress_failures_and_generic_errors():
    output = Output()
    probe_output = "\n".join(
        [
            "Unable to reach storage.googleapis.com:443",
            "Unable to reach quay.io:443",
            "docker: Cannot connect to the Docker daemon",
        ]
    )
    LegacyProbe().parse_probe_output(probe_output, output)
    assert output.failures == ["storage.googleapis.com:443", "quay.io:443"]
    assert [str(err) for err in output.errors] == [
        "generic(unhandled) error: docker: Cannot connect to the Docker daemon"
    ]
    assert "egress failures found" in output.debug_logs
    assert any(log.startswith("generic error found") for log in output.debug_logs)


def test_legacy_parse_ignores_same_line_retries():
    output = Output()
    LegacyProbe().parse_probe_output("Pulling image... Failed, retrying in 5s\n", output)
    assert output.is_successful()
    assert output.debug_logs == ["ignoring failure that is retrying: Pulling image... Failed, retrying in 5s"]


def test_legacy_parse_retry_on_separate_line_is_still_an_error():
    output = Output()
    LegacyProbe().parse_probe_output("Pull Failed\nretrying in 5s\n", output)
    assert len(output.errors) == 1


def test_legacy_userdata_expansion():
    userdata = LegacyProbe().get_expanded_userdata(
        {"VALIDATOR_IMAGE": "quay.io/example/validator:v1", "TIMEOUT": "2s", "CONFIG_PATH": "/cfg.yaml"}
    )
    script = yaml.safe_load(userdata)["runcmd"][0]
    assert 'echo "USERDATA BEGIN" > /dev/ttyS0' in script
    assert 'echo "VALIDATOR START" > /dev/ttyS0' in script
    assert 'IMAGE="quay.io/example/validator:v1"' in script
    assert '"$IMAGE" --timeout=2.00s --config=/cfg.yaml' in script
    assert 'echo "USERDATA END" > /dev/ttyS0' in script


def test_legacy_userdata_rejects_image_override_and_missing_required():
    with pytest.raises(ValidationError, match="IMAGE"):
        LegacyProbe().get_expanded_userdata(
            {"VALIDATOR_IMAGE": "img", "TIMEOUT": "2s", "CONFIG_PATH": "/c", "IMAGE": "evil"}
        )
    with pytest.raises(ValidationError):
        LegacyProbe().get_expanded_userdata({"TIMEOUT": "2s"})


def test_dummy_probe():
    probe = DummyProbe()
    script = probe.get_expanded_userdata({"anything": "ignored"})
    assert script.startswith("#!/bin/sh\n")
    assert "echo DUMMY_START > /dev/ttyS0" in script
    assert 'echo "hello world" > /dev/ttyS0' in script
    assert "echo DUMMY_END > /dev/ttyS0" in script

    output = Output()
    probe.parse_probe_output("hello world", output)
    assert output.is_successful()
    assert output.debug_logs == []
