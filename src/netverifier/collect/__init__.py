# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Collecting probe output from execution substrates."""

from .extract import Extraction, ExtractionState, extract_probe_output
from .poller import poll_probe_output
from .sources import ConsoleOutputSource, OutputSource, PodLogSource, SerialPortOutputSource

__all__ = [
    "ConsoleOutputSource",
    "Extraction",
    "ExtractionState",
    "OutputSource",
    "PodLogSource",
    "SerialPortOutputSource",
    "extract_probe_output",
    "poll_probe_output",
]
