# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging setup for the netverifier CLI and embedding programs."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

# Libraries that log every request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def setup_logging(level: str | None = None) -> int:
    """
    Configure the root logger and return the level applied. Without ``level``
    the ``NETVERIFIER_LOG_LEVEL`` environment variable decides (default WARNING).
    HTTP library chatter is only let through at DEBUG.
    """
    name = (level or os.getenv("NETVERIFIER_LOG_LEVEL") or "WARNING").upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    for chatty in _CHATTY_LOGGERS:
        logging.getLogger(chatty).setLevel(logging.DEBUG if numeric <= logging.DEBUG else logging.WARNING)
    return numeric


__all__ = ["LOG_FORMAT", "setup_logging"]
