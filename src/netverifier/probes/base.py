# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe contract shared by every egress probe implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from importlib import resources
from typing import ClassVar

from ..models.output import Output

PROBE_OPERATIONS = (
    "get_starting_token",
    "get_ending_token",
    "get_expanded_userdata",
    "parse_probe_output",
)

_REGISTRY: dict[str, type[Probe]] = {}


def load_template(filename: str) -> str:
    """Read a userdata template bundled under ``probes/templates``."""
    return resources.files(__package__).joinpath("templates", filename).read_text(encoding="utf-8")


class Probe(ABC):
    """
    A probe decides what the disposable workload runs and how its output is read.

    The workload prints the starting token, the diagnostic payload, then the
    ending token. Everything between the two tokens is handed to
    ``parse_probe_output``.

    Concrete subclasses register themselves by passing ``name=`` in the class
    statement; a named subclass that leaves any of the four operations abstract
    is rejected at definition time.
    """

    name: ClassVar[str] = ""

    def __init_subclass__(cls, *, name: str | None = None, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if name is None:
            return
        missing = [op for op in PROBE_OPERATIONS if getattr(getattr(cls, op, None), "__isabstractmethod__", False)]
        if missing:
            raise TypeError(f"probe {name!r} does not implement: {', '.join(missing)}")
        if name in _REGISTRY and _REGISTRY[name] is not cls:
            raise TypeError(f"probe name {name!r} is already registered by {_REGISTRY[name].__name__}")
        cls.name = name
        _REGISTRY[name] = cls

    @abstractmethod
    def get_starting_token(self) -> str:
        """Token printed right before the probe's payload."""

    @abstractmethod
    def get_ending_token(self) -> str:
        """Token printed right after the probe's payload."""

    @abstractmethod
    def get_expanded_userdata(self, variables: Mapping[str, str]) -> str:
        """Return the workload script/userdata; raises ValidationError on bad input."""

    @abstractmethod
    def parse_probe_output(self, probe_output: str, output: Output) -> None:
        """Record the verdicts found in ``probe_output`` onto ``output``."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


def registered_probes() -> dict[str, type[Probe]]:
    return dict(_REGISTRY)


__all__ = ["PROBE_OPERATIONS", "Probe", "load_template", "registered_probes"]
