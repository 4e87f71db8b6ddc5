"""Client-side subscriptions for the ActionCable protocol."""

from .core import ChannelIdentifier, CommandKind, encode_canonical, serialize_command
from .errors import (
    CableError,
    ClientUnavailableError,
    ContractViolation,
    EncodingError,
    TransportClosedError,
)
from .registry import SubscriptionRegistry
from .subscription import Subscription

__all__ = [
    "CableError",
    "ChannelIdentifier",
    "ClientUnavailableError",
    "CommandKind",
    "ContractViolation",
    "EncodingError",
    "Subscription",
    "SubscriptionRegistry",
    "TransportClosedError",
    "encode_canonical",
    "serialize_command",
]
