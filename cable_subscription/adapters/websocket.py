"""ClientSendPort backed by an open aiohttp websocket."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import aiohttp

from ..core import SentCallback
from ..errors import TransportClosedError

LOGGER = logging.getLogger(__name__)


class WebSocketSendPort:
    """Writes frames to a websocket owned by someone else.

    Connecting, reconnecting and reading belong to the websocket's owner; this
    class only serializes writers so frames from concurrent subscriptions are
    never interleaved on the socket.
    """

    def __init__(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        self._ws = ws
        self._lock = asyncio.Lock()
        self._frames_sent = 0

    @property
    def closed(self) -> bool:
        return self._ws.closed

    @property
    def frames_sent(self) -> int:
        return self._frames_sent

    async def send(self, text: str, on_sent: Optional[SentCallback] = None) -> None:
        """Send one text frame, then call ``on_sent``.

        Raises:
            TransportClosedError: If the websocket is already closed.
        """

        async with self._lock:
            if self._ws.closed:
                raise TransportClosedError("Websocket is closed")
            try:
                await self._ws.send_str(text)
            except ConnectionResetError as exc:
                raise TransportClosedError(f"Websocket connection lost: {exc}") from exc
            self._frames_sent += 1

        if on_sent is not None:
            on_sent()
