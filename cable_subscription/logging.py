"""Logging setup for cable-subscription and the aiohttp transport beneath it."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "cable_subscription"

# aiohttp loggers that report every websocket frame or connection event.
TRANSPORT_LOGGERS = ("aiohttp.client", "aiohttp.websocket", "aiohttp.access")


def build_formatter() -> logging.Formatter:
    return logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")


def configure_logging(
    level: str = "INFO", *, log_path: Optional[Path] = None, log_network: bool = False
) -> None:
    """Route subscription logs to the console and, optionally, a file.

    ``level`` applies to the root logger and to the ``cable_subscription``
    loggers, which report dropped actions and transport failures. Frame-level
    DEBUG records additionally need ``log_frames`` in the ``[subscription]``
    config section. The aiohttp transport loggers stay at WARNING unless
    ``log_network`` is set.
    """

    resolved = getattr(logging, level.upper(), logging.INFO)
    formatter = build_formatter()
    root = logging.getLogger()

    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root.setLevel(resolved)
    logging.getLogger(PACKAGE_LOGGER).setLevel(resolved)
    logging.captureWarnings(True)

    transport_level = resolved if log_network else max(resolved, logging.WARNING)
    for name in TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)
