# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe that only prints its tokens; for exercising launch and collection."""

from __future__ import annotations

from collections.abc import Mapping

from ..models.output import Output
from .base import Probe

STARTING_TOKEN = "DUMMY_START"
ENDING_TOKEN = "DUMMY_END"

USERDATA_SCRIPT = f"""#!/bin/sh
systemctl mask --now serial-getty@ttyS0.service
systemctl disable --now syslog.socket rsyslog.service
sysctl -w kernel.printk="0 4 0 7"
echo {STARTING_TOKEN} > /dev/ttyS0
echo "hello world" > /dev/ttyS0
echo {ENDING_TOKEN} > /dev/ttyS0
"""


class DummyProbe(Probe, name="dummy"):
    def get_starting_token(self) -> str:
        return STARTING_TOKEN

    def get_ending_token(self) -> str:
        return ENDING_TOKEN

    def get_expanded_userdata(self, variables: Mapping[str, str]) -> str:
        return USERDATA_SCRIPT

    def parse_probe_output(self, probe_output: str, output: Output) -> None:
        pass


__all__ = ["DummyProbe", "ENDING_TOKEN", "STARTING_TOKEN"]
