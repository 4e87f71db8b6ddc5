"""Constants used across the cable-subscription package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "cable-subscription"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / APP_NAME / DEFAULT_CONFIG_FILENAME

# Key reserved for the channel name inside an identifier object.
CHANNEL_KEY = "channel"

DEFAULT_CLOSE_TIMEOUT_SECONDS = 5.0
