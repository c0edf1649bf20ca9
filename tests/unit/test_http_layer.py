# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging

import httpx

from netverifier.config import HttpSettings
from netverifier.http import StubHttpClient, create_default_http_client
from netverifier.http.httpx_client import HttpxClient
from netverifier.http.models import HttpRequest, HttpResponse, RetryPolicy
from netverifier.http.retry import default_retry_policy, get_with_retries
from netverifier.log import setup_logging

URL = "https://lists.example/aws-classic.yaml"


def _refused():
    return HttpResponse(url=URL, error=httpx.ConnectError("refused"))


def test_response_states():
    assert HttpResponse(status_code=200).succeeded
    assert HttpResponse(status_code=404).ok
    assert not HttpResponse(status_code=404).succeeded
    assert HttpResponse(status_code=404).reason == "HTTP 404"
    refused = _refused()
    assert not refused.ok
    assert refused.reason == "refused"
    assert HttpResponse().reason == "no response"


def test_retry_policy_from_settings_and_delays():
    policy = RetryPolicy.from_settings(HttpSettings(max_retries=0, backoff_factor=0.5))
    assert policy.attempts == 1
    assert policy.backoff_factor == 1.0
    assert list(policy.delays()) == []
    assert list(RetryPolicy(attempts=4, initial_delay=0.5, backoff_factor=2.0).delays()) == [0.5, 1.0, 2.0]


def test_retries_transport_errors_and_retryable_statuses():
    client = StubHttpClient({URL: [_refused(), HttpResponse(status_code=503), HttpResponse(status_code=200, text="ok")]})
    sleeps = []
    response = get_with_retries(client, HttpRequest(url=URL), policy=RetryPolicy(attempts=3), sleep=sleeps.append)
    assert response.text == "ok"
    assert response.attempts == 3
    assert sleeps == [1.0, 2.0]


def test_does_not_retry_client_errors():
    client = StubHttpClient({URL: [HttpResponse(status_code=404), HttpResponse(status_code=200)]})
    response = get_with_retries(client, HttpRequest(url=URL), policy=RetryPolicy(attempts=3), sleep=lambda _: None)
    assert response.status_code == 404
    assert len(client.requests) == 1


def test_returns_last_response_when_attempts_run_out():
    client = StubHttpClient()
    sleeps = []
    response = get_with_retries(client, HttpRequest(url=URL), policy=RetryPolicy(attempts=2), sleep=sleeps.append)
    assert not response.ok
    assert response.attempts == 2
    assert "no stubbed response" in response.reason
    assert sleeps == [1.0]


def test_default_retry_policy_reads_env(monkeypatch):
    monkeypatch.setenv("NETVERIFIER_HTTP_RETRIES", "4")
    assert default_retry_policy().attempts == 4


def test_stub_http_client_queues_and_records():
    client = StubHttpClient()
    client.add("http://a", [HttpResponse(status_code=500), HttpResponse(status_code=200)])
    assert client.get(HttpRequest(url="http://a")).status_code == 500
    assert client.get(HttpRequest(url="http://a")).status_code == 200
    assert client.get(HttpRequest(url="http://a")).status_code == 200
    assert client.get(HttpRequest(url="http://missing")).ok is False
    assert [r.url for r in client.requests] == ["http://a", "http://a", "http://a", "http://missing"]


def test_httpx_client_sends_headers_and_params():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(200, text="log line\n", headers={"Content-Type": "text/plain"})

    with HttpxClient(
        HttpSettings(user_agent="UA/1.0"),
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    ) as client:
        resp = client.get(
            HttpRequest(
                url="https://kube.example/api/v1/namespaces/ns/pods/p/log",
                headers={"Authorization": "Bearer t"},
                params={"container": "c"},
            )
        )
    assert resp.succeeded
    assert resp.text == "log line\n"
    assert seen["request"].method == "GET"
    assert seen["request"].headers["User-Agent"] == "UA/1.0"
    assert seen["request"].headers["Authorization"] == "Bearer t"
    assert seen["request"].url.params["container"] == "c"


def test_httpx_client_truncates_large_bodies():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"a" * 100))
    client = HttpxClient(HttpSettings(max_body_bytes=10), client=httpx.Client(transport=transport))
    resp = client.get(HttpRequest(url="https://example"))
    assert resp.text == "a" * 10
    assert resp.truncated is True


def test_httpx_client_reports_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = HttpxClient(HttpSettings(), client=httpx.Client(transport=httpx.MockTransport(handler)))
    resp = client.get(HttpRequest(url="https://example"))
    assert resp.ok is False
    assert resp.status_code is None
    assert isinstance(resp.error, httpx.ConnectError)


def test_create_default_http_client():
    client = create_default_http_client(HttpSettings(timeout=3.0))
    assert isinstance(client, HttpxClient)
    assert client.settings.timeout == 3.0
    client.close()


def test_setup_logging_quiets_http_libraries(monkeypatch):
    monkeypatch.setenv("NETVERIFIER_LOG_LEVEL", "bogus")
    assert setup_logging() == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING
    assert setup_logging("debug") == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.DEBUG
