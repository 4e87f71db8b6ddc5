"""Core primitives for cable-subscription."""

from .identifier import ChannelIdentifier
from .protocols import (
    ClientSendPort,
    CompletionCallback,
    MessageHandler,
    SentCallback,
)
from .serializer import CommandKind, encode_canonical, serialize_command

__all__ = [
    "ChannelIdentifier",
    "ClientSendPort",
    "CommandKind",
    "CompletionCallback",
    "MessageHandler",
    "SentCallback",
    "encode_canonical",
    "serialize_command",
]
