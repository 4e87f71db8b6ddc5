import asyncio
import json
from typing import Any, Callable, Optional

import pytest


class RecordingPort:
    """In-memory ClientSendPort that records every frame it accepts."""

    def __init__(self, *, delay: Optional[Callable[[], float]] = None) -> None:
        self.frames: list[str] = []
        self.gate = asyncio.Event()
        self.gate.set()
        self._delay = delay

    async def send(self, text: str, on_sent: Optional[Callable[[], None]] = None) -> None:
        await self.gate.wait()
        if self._delay is not None:
            await asyncio.sleep(self._delay())
        self.frames.append(text)
        if on_sent is not None:
            on_sent()

    def decoded(self) -> list[dict[str, Any]]:
        return [json.loads(frame) for frame in self.frames]

    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(frame["data"]) for frame in self.decoded() if "data" in frame]


@pytest.fixture
def recording_port() -> RecordingPort:
    return RecordingPort()


@pytest.fixture
def port_factory() -> type[RecordingPort]:
    return RecordingPort
