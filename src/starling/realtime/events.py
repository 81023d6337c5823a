"""Datastar patch events and the repeat wrapper.

Frozen dataclasses, one per event kind.  Each carries its own field
schema; ``render()`` hands the fields to the line encoder every time it
is called, so fragment and signal generators are re-evaluated on each
emission.

Usage::

    event = MergeFragments(fragment=lambda: clock_html(), selector="#clock")
    stream = [event, repeat(event, 1000)]
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Protocol, runtime_checkable

from starling.errors import ValidationError
from starling.realtime.encoding import render_comment, render_event
from starling.realtime.kinds import EventKind, MergeMode

FragmentSource = str | Callable[[], str]


@runtime_checkable
class Renderable(Protocol):
    """Anything the scheduler can emit: a kind and a ``render()`` method."""

    @property
    def kind(self) -> EventKind | None: ...

    def render(self) -> str: ...


@dataclass(frozen=True, slots=True)
class ScriptAttribute:
    """An attribute placed on the ``<script>`` element of an execute-script event."""

    name: str
    value: str | bool


@dataclass(frozen=True, slots=True, kw_only=True)
class Event(ABC):
    """Base for the five patch event variants; not instantiated directly.

    ``retry`` is the client reconnect delay in milliseconds; ``None``
    leaves it out of the block.
    """

    kind: ClassVar[EventKind]

    retry: int | None = None

    @abstractmethod
    def fields(self) -> dict[str, Any]:
        """Field values keyed by their wire names."""

    def render(self) -> str:
        """Encode the event's current field values."""
        return render_event(self.kind, self.fields())


@dataclass(frozen=True, slots=True, kw_only=True)
class MergeFragments(Event):
    """Merge markup into the client's document at ``selector``."""

    kind: ClassVar[EventKind] = EventKind.MERGE_FRAGMENTS

    fragment: FragmentSource
    selector: str | None = None
    merge_mode: MergeMode | str | None = None
    use_view_transition: bool | None = None

    def fields(self) -> dict[str, Any]:
        return {
            "retry": self.retry,
            "fragment": self.fragment,
            "selector": self.selector,
            "mergeMode": self.merge_mode,
            "useViewTransition": self.use_view_transition,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class MergeSignals(Event):
    """Merge values into the client's signal store.

    ``signals`` may hold zero-argument callables as values (or be one);
    they are called on every render.
    """

    kind: ClassVar[EventKind] = EventKind.MERGE_SIGNALS

    signals: Mapping[str, Any] | Callable[[], Mapping[str, Any]]
    only_if_missing: bool | None = None

    def fields(self) -> dict[str, Any]:
        return {
            "retry": self.retry,
            "signals": self.signals,
            "onlyIfMissing": self.only_if_missing,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class RemoveFragments(Event):
    """Remove every element matching ``selector``."""

    kind: ClassVar[EventKind] = EventKind.REMOVE_FRAGMENTS

    selector: str

    def fields(self) -> dict[str, Any]:
        return {"retry": self.retry, "selector": self.selector}


@dataclass(frozen=True, slots=True, kw_only=True)
class RemoveSignals(Event):
    """Remove signals by dotted path (``nested.bar``)."""

    kind: ClassVar[EventKind] = EventKind.REMOVE_SIGNALS

    paths: Sequence[str]

    def fields(self) -> dict[str, Any]:
        return {"retry": self.retry, "paths": self.paths}


@dataclass(frozen=True, slots=True, kw_only=True)
class ExecuteScript(Event):
    """Run scripts on the client inside a generated ``<script>`` element."""

    kind: ClassVar[EventKind] = EventKind.EXECUTE_SCRIPT

    scripts: Sequence[str]
    attributes: Sequence[ScriptAttribute | Mapping[str, Any]]
    auto_remove: bool | None = None

    def fields(self) -> dict[str, Any]:
        return {
            "retry": self.retry,
            "autoRemove": self.auto_remove,
            "attributes": self.attributes,
            "scripts": self.scripts,
        }


@dataclass(frozen=True, slots=True)
class Comment:
    """An SSE comment frame (``: text``).

    Not a patch event: Datastar ignores comments, which makes them the
    usual way to keep an idle connection open through proxies.
    """

    text: str | Callable[[], str]

    kind: ClassVar[None] = None
    retry: ClassVar[None] = None

    def render(self) -> str:
        text = self.text() if callable(self.text) else self.text
        return render_comment(text)


@dataclass(frozen=True, slots=True)
class RepeatingEvent:
    """An event re-emitted every ``frequency_ms`` milliseconds.

    ``kind``, ``retry``, and ``render()`` delegate to the wrapped event,
    so each emission reflects its live state.  Wrapping a
    ``RepeatingEvent`` nests rather than overwrites: ``event`` always
    points at the immediate inner value.
    """

    event: "Event | Comment | RepeatingEvent"
    frequency_ms: int

    def __post_init__(self) -> None:
        frequency = self.frequency_ms
        if isinstance(frequency, bool) or not isinstance(frequency, int) or frequency <= 0:
            raise ValidationError(
                "frequency_ms",
                f"Repeat frequency must be a positive integer of milliseconds, got {frequency!r}",
            )

    @property
    def kind(self) -> EventKind | None:
        return self.event.kind

    @property
    def retry(self) -> int | None:
        return self.event.retry

    @property
    def root(self) -> "Event | Comment":
        """The innermost non-repeating event of the chain."""
        inner = self.event
        while isinstance(inner, RepeatingEvent):
            inner = inner.event
        return inner

    def render(self) -> str:
        return self.event.render()


def repeat(event: "Event | Comment | RepeatingEvent", frequency_ms: int) -> RepeatingEvent:
    """Wrap *event* so a stream re-emits it every *frequency_ms* milliseconds.

    Raises:
        ValidationError: If *frequency_ms* is not a positive integer.
    """
    return RepeatingEvent(event, frequency_ms)


def heartbeat(frequency_ms: int = 15_000) -> RepeatingEvent:
    """A repeating comment carrying the server's wall-clock time."""
    return repeat(Comment(lambda: time.strftime("%H:%M:%S")), frequency_ms)
