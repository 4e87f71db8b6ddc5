"""Command-line interface for cable-subscription."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from . import constants
from .config import load_config
from .core import ChannelIdentifier, CommandKind, serialize_command
from .errors import CableError
from .logging import configure_logging

LOGGER = logging.getLogger(__name__)


def _parse_param(value: str) -> tuple[str, str]:
    key, sep, raw = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Expected key=value, got {value!r}")
    return key, raw


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=constants.APP_NAME, description="ActionCable subscription frame tools"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    frame_parser = subparsers.add_parser(
        "frame", help="Print the wire frame for a channel command"
    )
    frame_parser.add_argument("--channel", required=True, help="Channel class name")
    frame_parser.add_argument(
        "--param",
        dest="params",
        action="append",
        type=_parse_param,
        default=[],
        metavar="KEY=VALUE",
        help="Channel parameter (repeatable)",
    )
    frame_parser.add_argument(
        "--kind",
        choices=[kind.value for kind in CommandKind],
        default=CommandKind.MESSAGE.value,
        help="Command to encode (default: message)",
    )
    frame_parser.add_argument("--action", help="Action name for message commands")
    frame_parser.add_argument(
        "--data", default=None, help="JSON object with the action payload"
    )

    subparsers.add_parser(
        "show-config", help="Print the resolved configuration and exit"
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    configure_logging(
        config.logging.level,
        log_path=config.logging.path,
        log_network=config.logging.log_network,
    )

    if args.command == "frame":
        try:
            data = json.loads(args.data) if args.data is not None else None
        except json.JSONDecodeError as exc:
            LOGGER.error("Invalid --data JSON: %s", exc)
            return 1

        try:
            identifier = ChannelIdentifier(args.channel, dict(args.params))
            print(serialize_command(args.kind, identifier, args.action, data))
        except CableError as exc:
            LOGGER.error("Cannot build frame: %s", exc)
            return 1
        return 0

    if args.command == "show-config":
        print(f"Configuration loaded from {config.path!s}\n")
        for section in config.raw.sections():
            print(f"[{section}]")
            for key, value in config.raw[section].items():
                print(f"{key} = {value}")
            print()
        return 0

    LOGGER.error("Unknown command: %s", args.command)
    return 1


if __name__ == "__main__":
    sys.exit(main())
