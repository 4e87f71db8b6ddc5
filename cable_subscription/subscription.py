"""Client-side handle for one ActionCable channel subscription.

A :class:`Subscription` turns ``send`` calls into ``message`` frames and hands
them to the client that owns the connection. Each subscription drains its own
FIFO with a single asyncio task, so frames of one subscription reach the client
in the order ``send`` was called, while ``send`` itself never blocks and may be
called from any thread.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
import weakref
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .config import SubscriptionConfig
from .core import (
    ChannelIdentifier,
    ClientSendPort,
    CommandKind,
    CompletionCallback,
    MessageHandler,
    serialize_command,
)
from .errors import (
    CableError,
    ClientUnavailableError,
    ContractViolation,
    EncodingError,
)

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class _PendingSend:
    action: str
    text: Optional[str]
    error: Optional[CableError]
    completion: Optional[CompletionCallback]
    completed: bool = False


class Subscription:
    """Ordered outbound relay and inbound message sink for a channel.

    Equality and hashing only consider the channel identifier, so two
    subscriptions to the same channel and params are interchangeable as keys
    even when their handlers differ.

    The client is held through a weak reference: the client owns its
    subscriptions, never the other way round.
    """

    def __init__(
        self,
        client: ClientSendPort,
        identifier: ChannelIdentifier,
        on_message: MessageHandler,
        *,
        config: Optional[SubscriptionConfig] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        if on_message is None:
            raise ContractViolation("A subscription requires a message handler")

        self._client_ref = weakref.ref(client)
        self._identifier = identifier
        self._on_message = on_message
        self._config = config or SubscriptionConfig()
        self._loop = loop or asyncio.get_running_loop()

        self._queue: asyncio.Queue[_PendingSend] = asyncio.Queue()
        self._drain_task: Optional[asyncio.Task[None]] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def identifier(self) -> ChannelIdentifier:
        return self._identifier

    @property
    def on_message(self) -> MessageHandler:
        return self._on_message

    @property
    def client(self) -> Optional[ClientSendPort]:
        """The owning client, or None once it has been garbage collected."""
        return self._client_ref()

    @property
    def pending(self) -> int:
        """Number of sends queued but not yet picked up by the drain task."""
        return self._queue.qsize()

    def send(
        self,
        action: str,
        data: Mapping[str, Any] | Any | None = None,
        completion: Optional[CompletionCallback] = None,
    ) -> None:
        """Queue a perform-action command and return immediately.

        ``completion`` is called exactly once on the subscription's event loop:
        with ``None`` after the client accepted the frame, or with the error
        that prevented it. The frame is encoded before ``send`` returns, so
        ``data`` may be reused by the caller right away; encoding failures are
        reported through ``completion`` in call order.
        """

        text: Optional[str] = None
        error: Optional[CableError] = None
        try:
            text = serialize_command(
                CommandKind.MESSAGE, self._identifier, action, data
            )
        except CableError as exc:
            error = exc
        except Exception as exc:
            error = EncodingError(f"Cannot encode action {action!r}: {exc!r}")
            error.__cause__ = exc

        pending = _PendingSend(
            action=action, text=text, error=error, completion=completion
        )

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._enqueue(pending)
            return

        try:
            self._loop.call_soon_threadsafe(self._enqueue, pending)
        except RuntimeError as exc:
            error = CableError(f"Event loop for {self._identifier} is closed")
            error.__cause__ = exc
            LOGGER.error("Cannot queue %r for %s: %s", action, self._identifier, error)
            self._complete(pending, error)

    async def dispatch(self, message: dict[str, Any]) -> None:
        """Deliver one decoded inbound message to the handler."""

        try:
            result = self._on_message(message)
            if asyncio.iscoroutine(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception:
            LOGGER.exception("Message handler for %s failed", self._identifier)

    async def flush(self) -> None:
        """Wait until every queued send has been processed."""

        await self._queue.join()

    async def aclose(self, timeout: Optional[float] = None) -> None:
        """Finish queued sends, then stop the drain task.

        Sends still queued after ``timeout`` seconds complete with a
        :class:`CableError`. Calling :meth:`send` afterwards starts a new drain
        task.
        """

        task = self._drain_task
        if task is None:
            return

        if timeout is None:
            timeout = self._config.close_timeout_seconds

        try:
            await asyncio.wait_for(self.flush(), timeout)
        except asyncio.TimeoutError:
            LOGGER.warning(
                "Closing %s with %d unsent command(s) after %.1fs",
                self._identifier,
                self._queue.qsize(),
                timeout,
            )

        if task.done():
            if not task.cancelled() and task.exception() is not None:
                LOGGER.error(
                    "Drain task for %s had stopped: %r",
                    self._identifier,
                    task.exception(),
                )
        else:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if self._drain_task is task:
            self._drain_task = None

        self._fail_queued(
            CableError(f"Subscription {self._identifier} closed before sending")
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _enqueue(self, pending: _PendingSend) -> None:
        self._queue.put_nowait(pending)
        if self._drain_task is None or self._drain_task.done():
            self._drain_task = self._loop.create_task(
                self._drain(), name=f"cable-subscription {self._identifier}"
            )

    async def _drain(self) -> None:
        while True:
            pending = await self._queue.get()
            try:
                await self._process(pending)
            except asyncio.CancelledError:
                self._complete(
                    pending,
                    CableError(f"Subscription {self._identifier} closed while sending"),
                )
                raise
            except Exception as exc:
                LOGGER.exception(
                    "Unexpected failure sending action %r on %s",
                    pending.action,
                    self._identifier,
                )
                self._complete(pending, exc)
            finally:
                self._queue.task_done()

    async def _process(self, pending: _PendingSend) -> None:
        if pending.error is not None:
            LOGGER.error(
                "Dropping action %r for %s: %s",
                pending.action,
                self._identifier,
                pending.error,
            )
            self._complete(pending, pending.error)
            return

        text = pending.text
        client = self._client_ref()
        if client is None:
            error = ClientUnavailableError(
                f"Client for {self._identifier} is no longer available"
            )
            LOGGER.warning("Dropping action %r: %s", pending.action, error)
            self._complete(pending, error)
            return

        if self._config.log_frames:
            LOGGER.debug("Forwarding frame for %s: %s", self._identifier, text)

        try:
            result = client.send(text, lambda: self._on_sent(pending))
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            LOGGER.warning(
                "Client failed to send action %r for %s: %s",
                pending.action,
                self._identifier,
                exc,
            )
            self._complete(pending, exc)

    def _on_sent(self, pending: _PendingSend) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._complete(pending, None)
        else:
            self._loop.call_soon_threadsafe(self._complete, pending, None)

    def _complete(
        self, pending: _PendingSend, error: Optional[BaseException]
    ) -> None:
        if pending.completed:
            return
        pending.completed = True

        if pending.completion is None:
            return

        try:
            pending.completion(error)
        except Exception:
            LOGGER.exception(
                "Completion callback for action %r on %s failed",
                pending.action,
                self._identifier,
            )

    def _fail_queued(self, error: CableError) -> None:
        while True:
            try:
                pending = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            self._complete(pending, error)
            self._queue.task_done()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Subscription):
            return NotImplemented
        return self._identifier == other._identifier

    def __hash__(self) -> int:
        return hash(self._identifier)

    def __repr__(self) -> str:
        return f"Subscription({self._identifier})"
