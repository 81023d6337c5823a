"""Server-Sent Events delivery over ASGI.

``EventStream`` is an ASGI application: mount it, or return it from a
route, and it streams its events until nothing repeats or the client
disconnects.

Usage::

    async def app(scope, receive, send):
        clock = repeat(merge_fragments(fragment=render_clock, selector="#clock"), 1000)
        await sse_response([clock])(scope, receive, send)
"""

import asyncio
import contextlib
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from starling._internal.asgi import Receive, Scope, Send
from starling.config import StreamConfig
from starling.diagnostics import log_error
from starling.realtime.channel import QueueChannel
from starling.realtime.events import Renderable
from starling.realtime.scheduler import Clock, StreamScheduler

logger = logging.getLogger("starling.stream")

DEFAULT_HEADERS: tuple[tuple[str, str], ...] = (
    ("content-type", "text/event-stream"),
    ("cache-control", "no-cache"),
    ("connection", "keep-alive"),
    ("x-accel-buffering", "no"),
)


@dataclass(frozen=True, slots=True)
class EventStream:
    """An SSE response that emits *events* through a ``StreamScheduler``.

    ``headers`` are merged over the defaults; a header with the same
    name (case-insensitive) replaces the default.
    """

    events: tuple[Renderable, ...]
    headers: tuple[tuple[str, str], ...] = ()
    config: StreamConfig = field(default_factory=StreamConfig)

    def response_headers(self) -> list[tuple[bytes, bytes]]:
        """Final header list for ``http.response.start``."""
        merged: dict[str, tuple[str, str]] = {}
        defaults = list(DEFAULT_HEADERS)
        if self.config.cors_allow_origin is not None:
            defaults.append(("access-control-allow-origin", self.config.cors_allow_origin))
        for name, value in (*defaults, *self.headers):
            merged[name.lower()] = (name.lower(), value)
        return [(name.encode("latin-1"), value.encode("latin-1")) for name, value in merged.values()]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await handle_sse(self, send, receive)


def sse_response(
    events: Iterable[Renderable],
    headers: Mapping[str, str] | None = None,
    config: StreamConfig | None = None,
) -> EventStream:
    """Build an ``EventStream`` for *events* with optional extra *headers*."""
    return EventStream(
        events=tuple(events),
        headers=tuple((headers or {}).items()),
        config=config or StreamConfig(),
    )


async def handle_sse(
    event_stream: EventStream,
    send: Send,
    receive: Receive,
    *,
    clock: Clock | None = None,
) -> None:
    """Stream an ``EventStream`` over an ASGI connection.

    1. Sends ``http.response.start`` with ``text/event-stream`` headers.
    2. Starts the scheduler, which writes the initial frames synchronously.
    3. Runs two tasks until either finishes:
       - **Drain**: forwards channel chunks as ASGI body messages.  Ends
         when the scheduler closes the channel.
       - **Disconnect monitor**: awaits ``http.disconnect`` and cancels
         the scheduler.
    4. Logs a failure from either task, then always cancels the
       scheduler and closes the response body.
    """
    await send(
        {
            "type": "http.response.start",
            "status": 200,
            "headers": event_stream.response_headers(),
        }
    )

    channel = QueueChannel()
    scheduler = StreamScheduler(
        event_stream.events, channel, clock=clock, config=event_stream.config
    )

    async def monitor_disconnect() -> None:
        """Wait for client disconnect."""
        while True:
            message = await receive()
            if message.get("type") == "http.disconnect":
                logger.debug("Client disconnected, cancelling stream")
                scheduler.cancel()
                return

    async def drain() -> None:
        async for chunk in channel:
            try:
                await send(
                    {
                        "type": "http.response.body",
                        "body": chunk,
                        "more_body": True,
                    }
                )
            except RuntimeError:
                break  # Response already closed (client disconnected)

    scheduler.start()
    drain_task = asyncio.create_task(drain())
    monitor_task = asyncio.create_task(monitor_disconnect())

    try:
        done, pending = await asyncio.wait(
            {drain_task, monitor_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
        for task in done:
            exc = task.exception()
            if exc is not None:
                log_error(exc, style=event_stream.config.traceback_style)
        for task in pending:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
    finally:
        scheduler.cancel()
        with contextlib.suppress(RuntimeError):
            await send(
                {
                    "type": "http.response.body",
                    "body": b"",
                    "more_body": False,
                }
            )
