"""Tests for command serialization."""

import json
import math
import threading
from dataclasses import dataclass, field

import pytest

from cable_subscription.core import (
    ChannelIdentifier,
    CommandKind,
    encode_canonical,
    serialize_command,
)
from cable_subscription.errors import ContractViolation, EncodingError


@pytest.fixture
def chat_room() -> ChannelIdentifier:
    return ChannelIdentifier("ChatChannel", {"room": "1"})


def test_message_frame_double_encodes_action_payload(chat_room) -> None:
    text = serialize_command(CommandKind.MESSAGE, chat_room, "speak", {"text": "hi"})
    frame = json.loads(text)

    assert frame["command"] == "message"
    assert frame["identifier"] == '{"channel":"ChatChannel","room":"1"}'
    assert isinstance(frame["data"], str)
    assert json.loads(frame["data"]) == {"action": "speak", "text": "hi"}


def test_message_frame_is_canonical_text(chat_room) -> None:
    text = serialize_command(CommandKind.MESSAGE, chat_room, "speak", {"text": "hi"})

    assert text == (
        r'{"command":"message",'
        r'"data":"{\"action\":\"speak\",\"text\":\"hi\"}",'
        r'"identifier":"{\"channel\":\"ChatChannel\",\"room\":\"1\"}"}'
    )


def test_payload_key_order_does_not_change_output(chat_room) -> None:
    first = serialize_command("message", chat_room, "move", {"x": 1, "y": 2})
    second = serialize_command("message", chat_room, "move", {"y": 2, "x": 1})

    assert first == second


@pytest.mark.parametrize("kind", [CommandKind.SUBSCRIBE, CommandKind.UNSUBSCRIBE])
def test_lifecycle_frames_have_no_data(chat_room, kind) -> None:
    frame = json.loads(serialize_command(kind, chat_room, data={"ignored": True}))

    assert frame == {"command": kind.value, "identifier": chat_room.canonical_string}


def test_kind_accepts_plain_strings(chat_room) -> None:
    frame = json.loads(serialize_command("unsubscribe", chat_room))

    assert frame["command"] == "unsubscribe"


def test_action_overrides_payload_action_key(chat_room) -> None:
    frame = json.loads(
        serialize_command("message", chat_room, "speak", {"action": "shout", "text": "hi"})
    )

    assert json.loads(frame["data"]) == {"action": "speak", "text": "hi"}


def test_nested_payload_values_are_preserved(chat_room) -> None:
    payload = {
        "ratio": 1.5,
        "count": 3,
        "flag": True,
        "nothing": None,
        "items": [1, "two", {"z": 1, "a": 2}],
        "meta": {"author": {"id": 7}},
        "pair": (1, 2),
    }

    frame = json.loads(serialize_command("message", chat_room, "update", payload))
    data = json.loads(frame["data"])

    assert data.pop("action") == "update"
    assert data["pair"] == [1, 2]
    assert data["items"] == [1, "two", {"a": 2, "z": 1}]
    assert data["meta"] == {"author": {"id": 7}}
    assert data["nothing"] is None


def test_dataclass_payload_is_encoded(chat_room) -> None:
    @dataclass
    class Move:
        x: int
        y: int

    frame = json.loads(serialize_command("message", chat_room, "move", Move(x=1, y=2)))

    assert json.loads(frame["data"]) == {"action": "move", "x": 1, "y": 2}


@pytest.mark.parametrize("action", [None, ""])
def test_message_without_action_is_a_contract_violation(chat_room, action) -> None:
    with pytest.raises(ContractViolation):
        serialize_command(CommandKind.MESSAGE, chat_room, action, {"text": "hi"})


def test_non_serialisable_payload_raises_encoding_error(chat_room) -> None:
    with pytest.raises(EncodingError) as excinfo:
        serialize_command("message", chat_room, "speak", {"text": object()})

    assert isinstance(excinfo.value.__cause__, TypeError)


def test_nan_payload_raises_encoding_error(chat_room) -> None:
    with pytest.raises(EncodingError):
        serialize_command("message", chat_room, "measure", {"value": math.inf})


def test_non_mapping_payload_raises_encoding_error(chat_room) -> None:
    with pytest.raises(EncodingError):
        serialize_command("message", chat_room, "speak", ["hi"])


def test_encode_canonical_sorts_nested_keys() -> None:
    assert encode_canonical({"b": {"d": 1, "c": 2}, "a": []}) == '{"a":[],"b":{"c":2,"d":1}}'


def test_unknown_kind_is_a_contract_violation(chat_room) -> None:
    with pytest.raises(ContractViolation):
        serialize_command("ping", chat_room)


def test_dataclass_payload_that_cannot_be_copied_raises_encoding_error(chat_room) -> None:
    @dataclass
    class Guarded:
        value: int = 1
        lock: threading.Lock = field(default_factory=threading.Lock)

    with pytest.raises(EncodingError):
        serialize_command("message", chat_room, "update", Guarded())


def test_deeply_nested_payload_raises_encoding_error(chat_room) -> None:
    nested: list = []
    for _ in range(100_000):
        nested = [nested]

    with pytest.raises(EncodingError) as excinfo:
        serialize_command("message", chat_room, "update", {"tree": nested})

    assert isinstance(excinfo.value.__cause__, RecursionError)
