# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Platforms a cluster under test may run on."""

from __future__ import annotations

from enum import Enum

from .errors import ValidationError


class Platform(str, Enum):
    AWS_CLASSIC = "aws-classic"
    AWS_HCP = "aws-hcp"
    GCP_CLASSIC = "gcp-classic"

    @classmethod
    def parse(cls, value: str | Platform | None) -> Platform:
        """Normalize a platform name, accepting the deprecated short aliases."""
        if isinstance(value, Platform):
            return value
        raw = (value or "").strip().lower()
        if not raw:
            return cls.AWS_CLASSIC
        normalized = _ALIASES.get(raw, raw)
        try:
            return cls(normalized)
        except ValueError:
            raise ValidationError(f"invalid platform type {value!r}") from None

    @property
    def is_aws(self) -> bool:
        return self in {Platform.AWS_CLASSIC, Platform.AWS_HCP}


_ALIASES = {
    "aws": Platform.AWS_CLASSIC.value,
    "gcp": Platform.GCP_CLASSIC.value,
    "hostedcluster": Platform.AWS_HCP.value,
}

__all__ = ["Platform"]
