"""Shared logging helpers for modelcat."""

from __future__ import annotations

import logging

# Chatty per-request loggers, only shown at DEBUG.
_HTTP_LOGGERS = ("httpx", "httpcore", "httpx_retries")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with a terse CLI format.

    ``force=True`` reconfigures an already configured root logger. Below
    DEBUG the HTTP client loggers are capped at WARNING so a ``--pull`` does
    not print one line per request.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    http_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)
