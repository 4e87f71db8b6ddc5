"""Wire encoding for ActionCable commands.

Every outbound frame is a JSON object with a ``command`` and an
``identifier``. ``message`` frames also carry ``data``, which the server
expects as a JSON *string* holding the action name and its payload::

    {"command":"message",
     "data":"{\"action\":\"speak\",\"text\":\"hi\"}",
     "identifier":"{\"channel\":\"ChatChannel\",\"room\":\"1\"}"}

All JSON produced here is canonical: keys are sorted at every depth and the
separators are compact, so equal inputs always yield byte-identical text.
"""

from __future__ import annotations

import copy
import dataclasses
import json
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping, Optional

from ..errors import ContractViolation, EncodingError

if TYPE_CHECKING:
    from .identifier import ChannelIdentifier


class CommandKind(str, Enum):
    """Commands a client can send over an ActionCable connection."""

    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"
    MESSAGE = "message"


def encode_canonical(value: Any) -> str:
    """Render ``value`` as canonical JSON text.

    Raises:
        EncodingError: If ``value`` holds something JSON cannot express,
            including NaN and infinities.
    """

    try:
        return json.dumps(
            value,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError, RecursionError) as exc:
        raise EncodingError(f"Value is not JSON serialisable: {exc}") from exc


def _payload_fields(data: Any) -> dict[str, Any]:
    if data is None:
        return {}
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        try:
            return dataclasses.asdict(data)
        except (TypeError, ValueError, RecursionError, copy.Error) as exc:
            raise EncodingError(
                f"Cannot convert {type(data).__name__} payload: {exc}"
            ) from exc
    if isinstance(data, Mapping):
        return dict(data)
    raise EncodingError(
        f"Payload must be a mapping or dataclass instance, got {type(data).__name__}"
    )


def serialize_command(
    kind: CommandKind | str,
    identifier: ChannelIdentifier,
    action: Optional[str] = None,
    data: Mapping[str, Any] | Any | None = None,
) -> str:
    """Build the text frame for a command addressed to ``identifier``.

    ``action`` and ``data`` only apply to ``message`` commands; a payload key
    named ``action`` is overridden by the action name.

    Raises:
        ContractViolation: If ``kind`` is unknown or a ``message`` command has
            no action name.
        EncodingError: If the payload cannot be encoded.
    """

    try:
        kind = CommandKind(kind)
    except ValueError as exc:
        raise ContractViolation(f"Unknown command kind: {kind!r}") from exc

    frame: dict[str, str] = {
        "command": kind.value,
        "identifier": identifier.canonical_string,
    }

    if kind is CommandKind.MESSAGE:
        if not action:
            raise ContractViolation("A message command requires an action name")
        body = _payload_fields(data)
        body["action"] = action
        frame["data"] = encode_canonical(body)

    return encode_canonical(frame)
