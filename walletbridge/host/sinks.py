"""Message sinks delivering serialized frames to the wallet host."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Protocol

from loguru import logger

from walletbridge.host.protocol import LogFrame


class HostSink(Protocol):
    """Anything that accepts one serialized frame at a time."""

    def post_message(self, message: str) -> None: ...


class CallbackSink:
    """Hands every frame to a plain callable."""

    def __init__(self, callback: Callable[[str], None]):
        self._callback = callback

    def post_message(self, message: str) -> None:
        self._callback(message)


class QueueSink:
    """Buffers frames in an asyncio queue for an in-process host."""

    def __init__(self) -> None:
        self.queue: asyncio.Queue[str] = asyncio.Queue()

    def post_message(self, message: str) -> None:
        self.queue.put_nowait(message)

    async def next_frame(self, timeout: float | None = None) -> dict[str, Any]:
        raw = await asyncio.wait_for(self.queue.get(), timeout=timeout)
        return json.loads(raw)

    def drain(self) -> list[dict[str, Any]]:
        frames: list[dict[str, Any]] = []
        while not self.queue.empty():
            frames.append(json.loads(self.queue.get_nowait()))
        return frames


def install_log_forwarding(sink: HostSink, level: str = "DEBUG") -> int:
    """
    Forward loguru records to the host as ``{type, data}`` frames.

    Returns the loguru handler id; pass it to ``logger.remove`` to stop.
    """

    def _forward(message: Any) -> None:
        record = message.record
        frame = LogFrame(type=record["level"].name.lower(), data=record["message"])
        sink.post_message(frame.encode())

    return logger.add(_forward, level=level, format="{message}")
