"""Tests for logging setup."""

import logging
from pathlib import Path

import pytest

from cable_subscription.logging import (
    PACKAGE_LOGGER,
    TRANSPORT_LOGGERS,
    configure_logging,
)


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    names = (PACKAGE_LOGGER, *TRANSPORT_LOGGERS)
    levels = {name: logging.getLogger(name).level for name in names}
    root_level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(root_level)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def test_configure_logging_writes_package_records_to_file(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "cable.log"

    configure_logging("debug", log_path=log_path)
    logging.getLogger("cable_subscription.subscription").debug("frame for %s", "room 1")
    for handler in logging.getLogger().handlers:
        handler.flush()

    content = log_path.read_text(encoding="utf-8")
    assert "DEBUG | cable_subscription.subscription | frame for room 1" in content
    assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG


def test_transport_loggers_are_quiet_unless_requested() -> None:
    configure_logging("DEBUG")

    assert all(
        logging.getLogger(name).level == logging.WARNING for name in TRANSPORT_LOGGERS
    )

    configure_logging("DEBUG", log_network=True)

    assert all(
        logging.getLogger(name).level == logging.DEBUG for name in TRANSPORT_LOGGERS
    )
