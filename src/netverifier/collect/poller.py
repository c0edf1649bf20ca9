# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Bounded polling of an output source until a probe's payload is complete."""

from __future__ import annotations

import logging
import threading
import time

from ..config import VerifierSettings, load_verifier_settings
from ..errors import (
    OutputDecodeError,
    OutputSourceError,
    ProbeOutputCancelledError,
    ProbeOutputCorruptedError,
    ProbeOutputTimeoutError,
)
from ..probes.base import Probe
from .extract import ExtractionState, extract_probe_output
from .sources import OutputSource

logger = logging.getLogger(__name__)


def poll_probe_output(
    source: OutputSource,
    probe: Probe,
    *,
    interval: float | None = None,
    timeout: float | None = None,
    cancel_event: threading.Event | None = None,
    settings: VerifierSettings | None = None,
) -> str:
    """
    Fetch from ``source`` every ``interval`` seconds until ``probe``'s payload is complete.

    Returns the payload. Raises ProbeOutputCorruptedError, ProbeOutputTimeoutError
    or ProbeOutputCancelledError when no payload can be had, and OutputSourceError
    when the source itself fails. Decode failures are treated as transient.
    """
    if interval is None or timeout is None:
        settings = settings or load_verifier_settings()
        interval = settings.poll_interval if interval is None else interval
        timeout = settings.poll_timeout if timeout is None else timeout

    starting_token = probe.get_starting_token()
    ending_token = probe.get_ending_token()
    deadline = time.monotonic() + timeout
    attempt = 0

    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise ProbeOutputCancelledError("cancelled while waiting for probe output")

        attempt += 1
        try:
            raw = source.fetch()
        except OutputDecodeError as exc:
            logger.warning("Attempt %d: could not decode probe output, will retry: %s", attempt, exc)
            raw = None
        except OutputSourceError:
            raise
        except Exception as exc:
            raise OutputSourceError(f"failed to fetch probe output: {exc}") from exc

        extraction = extract_probe_output(raw, starting_token, ending_token)
        if extraction.state is ExtractionState.COMPLETE:
            logger.info("Probe output complete after %d attempt(s)", attempt)
            return extraction.payload
        if extraction.state is ExtractionState.CORRUPTED:
            raise ProbeOutputCorruptedError(f"probe output corrupted: {extraction.reason}")

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise ProbeOutputTimeoutError(
                f"timed out after {timeout:.0f}s waiting for probe output (last state: {extraction.state.value})"
            )
        logger.info("Attempt %d: probe output %s, waiting %.0fs", attempt, extraction.state.value.lower(), interval)

        wait = min(interval, remaining)
        if cancel_event is not None:
            if cancel_event.wait(wait):
                raise ProbeOutputCancelledError("cancelled while waiting for probe output")
        else:
            time.sleep(wait)


__all__ = ["poll_probe_output"]
