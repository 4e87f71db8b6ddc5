"""Configuration loader for cable-subscription."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import constants


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None
    log_network: bool = False


@dataclass(slots=True)
class SubscriptionConfig:
    close_timeout_seconds: float = constants.DEFAULT_CLOSE_TIMEOUT_SECONDS
    log_frames: bool = False  # Log every forwarded frame at DEBUG level


@dataclass(slots=True)
class CableConfig:
    logging: LoggingConfig
    subscription: SubscriptionConfig
    raw: ConfigParser
    path: Path


def load_config(path: Optional[Path] = None) -> CableConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "logging": {
                "level": "INFO",
                "path": "",
                "log_network": "false",
            },
            "subscription": {
                "close_timeout_seconds": str(constants.DEFAULT_CLOSE_TIMEOUT_SECONDS),
                "log_frames": "false",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    log_path_value = parser.get("logging", "path", fallback="").strip()
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_network=parser.getboolean("logging", "log_network", fallback=False),
    )

    try:
        close_timeout = parser.getfloat(
            "subscription",
            "close_timeout_seconds",
            fallback=constants.DEFAULT_CLOSE_TIMEOUT_SECONDS,
        )
    except ValueError:
        close_timeout = constants.DEFAULT_CLOSE_TIMEOUT_SECONDS

    subscription = SubscriptionConfig(
        close_timeout_seconds=max(0.0, close_timeout),
        log_frames=parser.getboolean("subscription", "log_frames", fallback=False),
    )

    return CableConfig(
        logging=logging_config,
        subscription=subscription,
        raw=parser,
        path=config_path,
    )


def save_config(config: CableConfig) -> None:
    """Persist the current configuration to disk."""

    config_path = config.path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as stream:
        config.raw.write(stream)
