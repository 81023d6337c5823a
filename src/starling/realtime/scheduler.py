"""Stream scheduler: one-shot and repeating events onto one channel.

Lifecycle of a single stream::

    PENDING --start()--> ARMED   (at least one repeating event)
                    \\--> CLOSED  (nothing repeats; channel closed)
    ARMED/CLOSED --cancel()--> CANCELLED

``start()`` renders every event once, in list order, before any timer
can fire.  Each ``RepeatingEvent`` then gets its own timer handle; the
handles live in one dict and ``cancel()`` disarms all of them at once.

Timers come from a *clock*: any object with ``time()`` and
``call_at(when, callback, *args)`` returning a handle with ``cancel()``.
The running asyncio loop is the default; tests pass a
``starling.testing.ManualClock`` to control time.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from enum import StrEnum
from typing import Any, Protocol

from starling.config import StreamConfig
from starling.diagnostics import describe_event, log_error
from starling.errors import RenderError
from starling.realtime.channel import Channel
from starling.realtime.encoding import render_comment
from starling.realtime.events import Renderable, RepeatingEvent

logger = logging.getLogger("starling.stream")


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Clock(Protocol):
    def time(self) -> float: ...

    def call_at(self, when: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class SchedulerState(StrEnum):
    PENDING = "pending"
    ARMED = "armed"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class StreamScheduler:
    """Emit *events* to *channel*, repeating the ones wrapped with ``repeat()``.

    Render failures are isolated per emission: the error is logged and
    that frame is dropped (or, with ``config.debug``, replaced by an SSE
    comment describing it).  Other timers keep running, and the failing
    timer stays armed.

    Usage::

        scheduler = StreamScheduler([snapshot, repeat(clock, 1000)], channel)
        scheduler.start()
        ...
        scheduler.cancel()  # client went away
    """

    __slots__ = ("_channel", "_clock", "_config", "_events", "_handles", "_state")

    def __init__(
        self,
        events: Iterable[Renderable],
        channel: Channel,
        *,
        clock: Clock | None = None,
        config: StreamConfig | None = None,
    ) -> None:
        self._events: tuple[Renderable, ...] = tuple(events)
        self._channel = channel
        self._clock = clock
        self._config = config or StreamConfig()
        self._handles: dict[int, TimerHandle] = {}
        self._state = SchedulerState.PENDING

    def __repr__(self) -> str:
        labels = ", ".join(describe_event(event) for event in self._events)
        return f"<StreamScheduler {self._state}: {labels}>"

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def armed(self) -> int:
        """Number of timers currently armed."""
        return len(self._handles)

    def start(self) -> None:
        """Emit every event once, then arm timers for the repeating ones."""
        if self._state is not SchedulerState.PENDING:
            msg = f"Scheduler already started (state: {self._state})"
            raise RuntimeError(msg)
        if self._clock is None:
            self._clock = asyncio.get_running_loop()

        for event in self._events:
            self._emit(event)
            if self._state is SchedulerState.CANCELLED:
                return

        self._state = SchedulerState.ARMED
        now = self._clock.time()
        for index, event in enumerate(self._events):
            if isinstance(event, RepeatingEvent):
                interval = event.frequency_ms / 1000
                self._arm(index, now + interval, interval)

        if not self._handles:
            self._state = SchedulerState.CLOSED
            self._channel.close()
            logger.debug("Stream closed after %d one-shot events", len(self._events))
            return

        logger.debug("Stream armed %d repeating events", len(self._handles))

    def cancel(self) -> None:
        """Disarm every timer and close the channel.  Safe to call repeatedly."""
        if self._state is SchedulerState.CANCELLED:
            return
        armed = len(self._handles)
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()
        self._state = SchedulerState.CANCELLED
        self._channel.close()
        logger.debug("Stream cancelled, disarmed %d timers", armed)

    def _arm(self, index: int, deadline: float, interval: float) -> None:
        assert self._clock is not None
        self._handles[index] = self._clock.call_at(deadline, self._tick, index, deadline, interval)

    def _tick(self, index: int, deadline: float, interval: float) -> None:
        if self._state is not SchedulerState.ARMED:
            return
        self._emit(self._events[index])
        if self._state is not SchedulerState.ARMED:
            return

        assert self._clock is not None
        next_deadline = deadline + interval
        now = self._clock.time()
        if next_deadline <= now:
            # Fell behind (blocking generator or busy loop): skip missed ticks
            next_deadline = now + interval
        self._arm(index, next_deadline, interval)

    def _emit(self, event: Renderable) -> None:
        if self._channel.closed:
            # Consumer closed the channel under us
            self.cancel()
            return

        try:
            text = event.render()
        except Exception as exc:
            log_error(exc, event, style=self._config.traceback_style)
            if not self._config.debug:
                return
            text = render_comment(str(RenderError(event, exc)))

        if self._state is SchedulerState.CANCELLED:
            # A generator cancelled the stream while rendering
            return
        self._channel.write(text.encode("utf-8"))

