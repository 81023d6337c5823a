"""Event factory.

``create(kind, options)`` validates the required fields of a kind and
builds the matching event.  Options use the protocol's camelCase names
(``mergeMode``, ``onlyIfMissing``, ...); snake_case spellings are
accepted too.  Unknown keys are ignored and values are stored as given:
generators are not evaluated until render time.

Usage::

    create("remove-signals", {"paths": ["foo", "nested.bar"]})
    merge_fragments(fragment="<div id='clock'>12:00</div>", selector="#clock")
"""

from collections.abc import Mapping
from typing import Any

from starling.errors import ValidationError
from starling.realtime.events import (
    Event,
    ExecuteScript,
    MergeFragments,
    MergeSignals,
    RemoveFragments,
    RemoveSignals,
)
from starling.realtime.kinds import REQUIRED_FIELDS, EventKind, parse_kind

_SNAKE_CASE = {
    "mergeMode": "merge_mode",
    "useViewTransition": "use_view_transition",
    "onlyIfMissing": "only_if_missing",
    "autoRemove": "auto_remove",
}


def _option(options: Mapping[str, Any], name: str) -> Any:
    value = options.get(name)
    if value is None and name in _SNAKE_CASE:
        value = options.get(_SNAKE_CASE[name])
    return value


def create(kind: EventKind | str, options: Mapping[str, Any]) -> Event:
    """Build an event of *kind* from *options*.

    Raises:
        ValidationError: Naming the first missing required field (in the
            kind's declared order), an unknown kind, a negative ``retry``,
            or an empty remove-fragments ``selector``.
    """
    kind = parse_kind(kind)

    for name in REQUIRED_FIELDS[kind]:
        if _option(options, name) is None:
            raise ValidationError(name)

    retry = _option(options, "retry")
    if retry is not None and (isinstance(retry, bool) or not isinstance(retry, int) or retry < 0):
        raise ValidationError("retry", f"retry must be a non-negative integer, got {retry!r}")

    match kind:
        case EventKind.MERGE_FRAGMENTS:
            return MergeFragments(
                fragment=options["fragment"],
                selector=_option(options, "selector"),
                merge_mode=_option(options, "mergeMode"),
                use_view_transition=_option(options, "useViewTransition"),
                retry=retry,
            )
        case EventKind.MERGE_SIGNALS:
            return MergeSignals(
                signals=options["signals"],
                only_if_missing=_option(options, "onlyIfMissing"),
                retry=retry,
            )
        case EventKind.REMOVE_FRAGMENTS:
            if not options["selector"]:
                raise ValidationError("selector", "selector must not be empty")
            return RemoveFragments(selector=options["selector"], retry=retry)
        case EventKind.REMOVE_SIGNALS:
            return RemoveSignals(paths=options["paths"], retry=retry)
        case EventKind.EXECUTE_SCRIPT:
            return ExecuteScript(
                scripts=options["scripts"],
                attributes=options["attributes"],
                auto_remove=_option(options, "autoRemove"),
                retry=retry,
            )


def merge_fragments(**options: Any) -> MergeFragments:
    """Build a merge-fragments event; see :func:`create`."""
    return create(EventKind.MERGE_FRAGMENTS, options)  # type: ignore[return-value]


def merge_signals(**options: Any) -> MergeSignals:
    """Build a merge-signals event; see :func:`create`."""
    return create(EventKind.MERGE_SIGNALS, options)  # type: ignore[return-value]


def remove_fragments(**options: Any) -> RemoveFragments:
    """Build a remove-fragments event; see :func:`create`."""
    return create(EventKind.REMOVE_FRAGMENTS, options)  # type: ignore[return-value]


def remove_signals(**options: Any) -> RemoveSignals:
    """Build a remove-signals event; see :func:`create`."""
    return create(EventKind.REMOVE_SIGNALS, options)  # type: ignore[return-value]


def execute_script(**options: Any) -> ExecuteScript:
    """Build an execute-script event; see :func:`create`."""
    return create(EventKind.EXECUTE_SCRIPT, options)  # type: ignore[return-value]
