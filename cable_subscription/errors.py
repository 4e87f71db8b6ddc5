"""Error types raised by cable-subscription."""

from __future__ import annotations


class CableError(RuntimeError):
    """Base class for all cable-subscription failures."""


class EncodingError(CableError):
    """Raised when an identifier or payload cannot be encoded as JSON."""


class ContractViolation(CableError, ValueError):
    """Raised when a caller breaks an API precondition.

    Examples are a ``message`` command without an action name or identifier
    params that try to override the ``channel`` key.
    """


class ClientUnavailableError(CableError):
    """Raised when the client owning a subscription no longer exists."""


class TransportClosedError(CableError):
    """Raised when a frame is handed to a closed websocket."""
