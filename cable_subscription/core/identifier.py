"""Canonical identity for a channel subscription."""

from __future__ import annotations

import json
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..constants import CHANNEL_KEY
from ..errors import ContractViolation, EncodingError
from .serializer import encode_canonical


class ChannelIdentifier:
    """A channel name plus its parameters, compared by canonical JSON.

    The canonical string is what the server receives as ``identifier`` and is
    also the equality and hash key, so two identifiers built from the same
    pairs in any insertion order are interchangeable.
    """

    __slots__ = ("_channel", "_params", "_string")

    def __init__(
        self, channel: str, params: Optional[Mapping[str, Any]] = None
    ) -> None:
        if not isinstance(channel, str) or not channel:
            raise ContractViolation("Channel name must be a non-empty string")

        params = dict(params or {})
        if CHANNEL_KEY in params:
            raise ContractViolation(
                f"Parameter {CHANNEL_KEY!r} is reserved for the channel name"
            )

        self._channel = channel
        self._string = encode_canonical({CHANNEL_KEY: channel, **params})
        self._params = MappingProxyType(params)

    @classmethod
    def make(
        cls, channel: str, params: Optional[Mapping[str, Any]] = None
    ) -> ChannelIdentifier:
        return cls(channel, params)

    @classmethod
    def from_string(cls, text: str) -> ChannelIdentifier:
        """Parse an identifier string as found in server frames."""

        try:
            decoded = json.loads(text)
        except (TypeError, json.JSONDecodeError) as exc:
            raise EncodingError(f"Malformed channel identifier: {text!r}") from exc

        if not isinstance(decoded, dict) or not isinstance(
            decoded.get(CHANNEL_KEY), str
        ):
            raise EncodingError(f"Identifier has no channel name: {text!r}")

        channel = decoded.pop(CHANNEL_KEY)
        return cls(channel, decoded)

    @property
    def channel(self) -> str:
        return self._channel

    @property
    def params(self) -> Mapping[str, Any]:
        return self._params

    @property
    def canonical_string(self) -> str:
        return self._string

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChannelIdentifier):
            return NotImplemented
        return self._string == other._string

    def __hash__(self) -> int:
        return hash(self._string)

    def __str__(self) -> str:
        return self._string

    def __repr__(self) -> str:
        return f"ChannelIdentifier({self._string})"
