"""Registry owning the subscriptions of one client connection."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Iterator, Mapping, Optional

from .config import SubscriptionConfig
from .core import (
    ChannelIdentifier,
    ClientSendPort,
    CommandKind,
    MessageHandler,
    SentCallback,
    serialize_command,
)
from .errors import CableError
from .subscription import Subscription

LOGGER = logging.getLogger(__name__)


class SubscriptionRegistry:
    """Creates, deduplicates and tears down subscriptions.

    The registry is the client its subscriptions hold a weak reference to:
    it keeps them alive and relays their frames to ``transport``.

    Usage:
        registry = SubscriptionRegistry(WebSocketSendPort(ws))
        chat = await registry.subscribe("ChatChannel", {"room": "1"}, on_message=on_chat)
        chat.send("speak", {"text": "hi"})
        ...
        await registry.unsubscribe(chat)
    """

    def __init__(
        self,
        transport: ClientSendPort,
        *,
        config: Optional[SubscriptionConfig] = None,
    ) -> None:
        self._transport = transport
        self._config = config or SubscriptionConfig()
        self._subscriptions: dict[ChannelIdentifier, Subscription] = {}

    def send(
        self, text: str, on_sent: Optional[SentCallback] = None
    ) -> Awaitable[None] | None:
        """Forward a serialized frame to the transport."""

        return self._transport.send(text, on_sent)

    async def subscribe(
        self,
        channel: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        on_message: MessageHandler,
    ) -> Subscription:
        """Return the subscription for ``channel``/``params``, creating it if needed.

        An existing subscription keeps its original handler. A new one is
        announced to the server with a ``subscribe`` command.
        """

        identifier = ChannelIdentifier(channel, params)
        existing = self._subscriptions.get(identifier)
        if existing is not None:
            LOGGER.debug("Reusing existing subscription for %s", identifier)
            return existing

        subscription = Subscription(
            self,
            identifier,
            on_message,
            config=self._config,
            loop=asyncio.get_running_loop(),
        )
        self._subscriptions[identifier] = subscription

        try:
            await self._send_command(CommandKind.SUBSCRIBE, identifier)
        except Exception:
            del self._subscriptions[identifier]
            raise

        LOGGER.info("Subscribed to %s", identifier)
        return subscription

    async def unsubscribe(self, target: Subscription | ChannelIdentifier | str) -> bool:
        """Remove a subscription and tell the server about it.

        Commands already queued on the subscription are sent first. Returns
        False when nothing was subscribed under that identifier. If the
        ``unsubscribe`` frame cannot be sent the subscription stays registered
        and the error propagates, so the call can be retried.
        """

        identifier = self._resolve(target)
        subscription = self._subscriptions.get(identifier)
        if subscription is None:
            return False

        await subscription.aclose()
        await self._send_command(CommandKind.UNSUBSCRIBE, identifier)
        if self._subscriptions.get(identifier) is subscription:
            del self._subscriptions[identifier]
        LOGGER.info("Unsubscribed from %s", identifier)
        return True

    def get(self, target: ChannelIdentifier | str) -> Optional[Subscription]:
        """Look up a subscription by identifier or its canonical string."""

        return self._subscriptions.get(self._resolve(target))

    def identifiers(self) -> list[ChannelIdentifier]:
        return list(self._subscriptions)

    async def aclose(self) -> None:
        """Stop every subscription without sending unsubscribe commands."""

        subscriptions = list(self._subscriptions.values())
        self._subscriptions.clear()
        for subscription in subscriptions:
            await subscription.aclose()

    def __contains__(self, target: object) -> bool:
        if not isinstance(target, (Subscription, ChannelIdentifier, str)):
            return False
        try:
            identifier = self._resolve(target)
        except CableError:
            return False
        return identifier in self._subscriptions

    def __len__(self) -> int:
        return len(self._subscriptions)

    def __iter__(self) -> Iterator[Subscription]:
        return iter(list(self._subscriptions.values()))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    @staticmethod
    def _resolve(target: Subscription | ChannelIdentifier | str) -> ChannelIdentifier:
        if isinstance(target, Subscription):
            return target.identifier
        if isinstance(target, ChannelIdentifier):
            return target
        return ChannelIdentifier.from_string(target)

    async def _send_command(
        self, kind: CommandKind, identifier: ChannelIdentifier
    ) -> None:
        text = serialize_command(kind, identifier)
        if self._config.log_frames:
            LOGGER.debug("Sending %s frame: %s", kind.value, text)
        result = self.send(text)
        if inspect.isawaitable(result):
            await result
