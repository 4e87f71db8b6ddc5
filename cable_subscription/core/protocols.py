"""Protocol definitions for the client collaborator and callbacks."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, Protocol


MessageHandler = Callable[[dict[str, Any]], Awaitable[None] | None]
SentCallback = Callable[[], None]
CompletionCallback = Callable[[Optional[BaseException]], None]


class ClientSendPort(Protocol):
    """Minimal contract for whatever owns the shared connection."""

    def send(
        self, text: str, on_sent: Optional[SentCallback] = None
    ) -> Awaitable[None] | None:
        """Queue a serialized frame for transmission.

        ``on_sent`` runs once the transport accepted the frame. Implementations
        must accept calls from many subscriptions concurrently.
        """
        ...
