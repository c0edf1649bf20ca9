# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level egress verification: render userdata, run a workload, read its verdict."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Protocol

from .collect.poller import poll_probe_output
from .collect.sources import OutputSource
from .config import VerifierSettings, load_verifier_settings
from .egress.lists import EgressListGenerator
from .errors import (
    EgressListError,
    ProbeOutputCancelledError,
    ProbeOutputError,
    ValidationError,
    VerifierError,
)
from .http.client import HttpClient
from .models.output import Output
from .platform import Platform
from .probes.base import Probe
from .probes.registry import DEFAULT_PROBE, get_probe

logger = logging.getLogger(__name__)


class Workload(Protocol):
    """Disposable machine or pod that runs the probe userdata (cloud lifecycle lives here)."""

    def launch(self, userdata: str) -> Any: ...

    def output_source(self, handle: Any) -> OutputSource: ...

    def terminate(self, handle: Any) -> None: ...


@dataclass
class ValidateEgressRequest:
    """Inputs for one verification run."""

    probe: str = DEFAULT_PROBE
    platform: Platform | str = Platform.AWS_CLASSIC
    region: str = ""
    timeout: str | None = None
    delay: str | None = None
    no_tls: bool = False
    egress_list_yaml: str = ""
    cacert: str = ""
    http_proxy: str = ""
    https_proxy: str = ""
    no_proxy: str = ""
    ensure_private: bool = False
    use_systemd: bool = False
    skip_termination: bool = False
    poll_interval: float | None = None
    poll_timeout: float | None = None
    variables: dict[str, str] = field(default_factory=dict)


class EgressVerifier:
    """
    Runs one egress verification against a Workload and reports it as an Output.

    Every outcome lands in the returned Output: blocked endpoints as failures,
    inconclusive runs as exceptions, and faults in the machinery as errors.
    """

    def __init__(
        self,
        workload: Workload | None = None,
        *,
        http_client: HttpClient | None = None,
        settings: VerifierSettings | None = None,
        cancel_event: threading.Event | None = None,
    ):
        self.workload = workload
        self.http_client = http_client
        self.settings = settings or load_verifier_settings()
        self.cancel_event = cancel_event

    def resolve_probe(self, request: ValidateEgressRequest) -> Probe:
        if (request.probe or DEFAULT_PROBE).strip().lower() == "curl":
            return get_probe("curl", ensure_private=request.ensure_private, settings=self.settings)
        return get_probe(request.probe)

    def userdata_variables(self, request: ValidateEgressRequest) -> dict[str, str]:
        """Variables handed to the probe template, egress URLs included."""
        platform = Platform.parse(request.platform)
        variables = {"AWS_REGION": request.region} if request.region else {}
        egress_urls = EgressListGenerator(
            platform,
            variables=dict(variables),
            http_client=self.http_client,
            settings=self.settings,
        ).generate(request.egress_list_yaml)
        logger.info(
            "Probing %d URL(s) for %s (%d without TLS verification)",
            len(egress_urls),
            platform.value,
            len(egress_urls.tls_disabled),
        )

        variables.update(
            {
                "TIMEOUT": request.timeout or self.settings.curl_timeout,
                "DELAY": request.delay or self.settings.delay,
                "URLS": " ".join(egress_urls.tls),
                "TLSDISABLED_URLS": " ".join(egress_urls.tls_disabled),
                "NOTLS": "true" if request.no_tls else "false",
                "USE_SYSTEMD": "true" if request.use_systemd else "false",
            }
        )
        for name, value in (
            ("CACERT", request.cacert),
            ("HTTP_PROXY", request.http_proxy),
            ("HTTPS_PROXY", request.https_proxy),
            ("NO_PROXY", request.no_proxy),
        ):
            if value:
                variables[name] = value
        variables.update(request.variables)
        return variables

    def build_userdata(self, request: ValidateEgressRequest, probe: Probe | None = None) -> str:
        """Render the workload userdata; raises ValidationError or EgressListError."""
        probe = probe or self.resolve_probe(request)
        userdata = probe.get_expanded_userdata(self.userdata_variables(request))
        size = len(userdata.encode("utf-8"))
        if size > self.settings.max_userdata_bytes:
            raise ValidationError(
                f"userdata is {size} bytes, more than the {self.settings.max_userdata_bytes} byte limit"
            )
        return userdata

    def validate_egress(self, request: ValidateEgressRequest) -> Output:
        output = Output()
        try:
            probe = self.resolve_probe(request)
            userdata = self.build_userdata(request, probe)
        except (ValidationError, EgressListError) as exc:
            return output.add_error(exc)
        if self.workload is None:
            return output.add_error(VerifierError("no workload configured to run the probe"))
        output.add_debug_logs(f"Rendered {len(userdata)} characters of userdata for probe {probe.name}")

        handle = None
        try:
            handle = self.workload.launch(userdata)
            output.add_debug_logs(f"Launched workload {handle}")
            payload = poll_probe_output(
                self.workload.output_source(handle),
                probe,
                interval=request.poll_interval if request.poll_interval is not None else self.settings.poll_interval,
                timeout=request.poll_timeout if request.poll_timeout is not None else self.settings.poll_timeout,
                cancel_event=self.cancel_event,
            )
            probe.parse_probe_output(payload, output)
        except ProbeOutputError as exc:
            output.add_exception(exc)
        except KeyboardInterrupt:
            output.add_exception(ProbeOutputCancelledError("interrupted while verifying egress"))
        except Exception as exc:  # noqa: BLE001
            output.add_error(exc)
        finally:
            if handle is not None:
                self._terminate(handle, request, output)

        return output

    def _terminate(self, handle: Any, request: ValidateEgressRequest, output: Output) -> None:
        if request.skip_termination:
            logger.warning("Leaving workload %s running (termination skipped)", handle)
            return
        try:
            self.workload.terminate(handle)
            output.add_debug_logs(f"Terminated workload {handle}")
        except Exception as exc:  # noqa: BLE001
            output.add_error(exc)


def verify_many(
    requests: Iterable[ValidateEgressRequest],
    workload_factory: Callable[[ValidateEgressRequest], Workload],
    *,
    http_client: HttpClient | None = None,
    settings: VerifierSettings | None = None,
    cancel_event: threading.Event | None = None,
    max_workers: int | None = None,
) -> Output:
    """
    Run independent verifications concurrently and merge their results.

    Each run writes to its own Output; merging happens in request order once all
    runs have finished.
    """
    pending = list(requests)
    merged = Output()
    if not pending:
        return merged
    settings = settings or load_verifier_settings()

    def _run(request: ValidateEgressRequest) -> Output:
        try:
            workload = workload_factory(request)
        except Exception as exc:  # noqa: BLE001
            logger.error("Could not prepare a workload for region %r: %s", request.region, exc)
            return Output().add_error(exc)
        verifier = EgressVerifier(
            workload,
            http_client=http_client,
            settings=settings,
            cancel_event=cancel_event,
        )
        return verifier.validate_egress(request)

    executor = ThreadPoolExecutor(max_workers=max_workers or len(pending))
    try:
        futures = [executor.submit(_run, request) for request in pending]
        results = [future.result() for future in futures]
    except KeyboardInterrupt:
        if cancel_event is not None:
            cancel_event.set()
        executor.shutdown(wait=False, cancel_futures=True)
        raise
    finally:
        executor.shutdown(wait=True)

    for result in results:
        merged.merge(result)
    return merged


__all__ = ["EgressVerifier", "ValidateEgressRequest", "Workload", "verify_many"]
