"""Output channels for encoded event bytes.

The scheduler only needs an append-only sink it can close.  Writes are
synchronous so they can happen inside timer callbacks; the ASGI layer
drains a ``QueueChannel`` asynchronously.
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Protocol

from starling.errors import StreamClosedError


class Channel(Protocol):
    """Append-only byte sink with a close signal."""

    @property
    def closed(self) -> bool: ...

    def write(self, data: bytes) -> None: ...

    def close(self) -> None: ...


class QueueChannel:
    """A channel backed by an ``asyncio.Queue``.

    Iterating yields each written chunk in order and stops once the
    channel is closed and drained.

    Usage::

        channel = QueueChannel()
        scheduler = StreamScheduler(events, channel)
        scheduler.start()
        async for chunk in channel:
            await send_body(chunk)
    """

    __slots__ = ("_closed", "_queue")

    def __init__(self) -> None:
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> None:
        if self._closed:
            raise StreamClosedError("Cannot write to a closed channel")
        self._queue.put_nowait(data)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)  # Sentinel wakes a waiting reader

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._drain()

    async def _drain(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self._queue.get()
            if chunk is None:
                return
            yield chunk


class BufferChannel:
    """A channel that collects chunks in memory.  Handy for tests and batch output."""

    __slots__ = ("_closed", "chunks")

    def __init__(self) -> None:
        self.chunks: list[bytes] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> None:
        if self._closed:
            raise StreamClosedError("Cannot write to a closed channel")
        self.chunks.append(data)

    def close(self) -> None:
        self._closed = True

    def text(self) -> str:
        """Everything written so far, decoded."""
        return b"".join(self.chunks).decode("utf-8")
