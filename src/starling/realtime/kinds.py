"""Event kinds, merge modes, and per-kind field schemas.

Each kind has a fixed field order (the order ``data:`` lines appear on
the wire) and a required-field order (the order the factory checks).
"""

from enum import StrEnum

from starling.errors import ValidationError


class EventKind(StrEnum):
    """The five Datastar patch event kinds, valued by their wire names."""

    MERGE_FRAGMENTS = "datastar-merge-fragments"
    MERGE_SIGNALS = "datastar-merge-signals"
    REMOVE_FRAGMENTS = "datastar-remove-fragments"
    REMOVE_SIGNALS = "datastar-remove-signals"
    EXECUTE_SCRIPT = "datastar-execute-script"

    @property
    def short_name(self) -> str:
        """Kind name without the ``datastar-`` prefix (``merge-fragments``)."""
        return self.value.removeprefix("datastar-")


class MergeMode(StrEnum):
    """How merged markup combines with the markup already at the selector."""

    MORPH = "morph"
    INNER = "inner"
    OUTER = "outer"
    PREPEND = "prepend"
    APPEND = "append"
    BEFORE = "before"
    AFTER = "after"
    UPSERT_ATTRIBUTES = "upsertAttributes"


FIELD_ORDER: dict[EventKind, tuple[str, ...]] = {
    EventKind.MERGE_FRAGMENTS: ("fragment", "selector", "mergeMode", "useViewTransition"),
    EventKind.MERGE_SIGNALS: ("signals", "onlyIfMissing"),
    EventKind.REMOVE_FRAGMENTS: ("selector",),
    EventKind.REMOVE_SIGNALS: ("paths",),
    EventKind.EXECUTE_SCRIPT: ("autoRemove", "attributes", "scripts"),
}

REQUIRED_FIELDS: dict[EventKind, tuple[str, ...]] = {
    EventKind.MERGE_FRAGMENTS: ("fragment",),
    EventKind.MERGE_SIGNALS: ("signals",),
    EventKind.REMOVE_FRAGMENTS: ("selector",),
    EventKind.REMOVE_SIGNALS: ("paths",),
    EventKind.EXECUTE_SCRIPT: ("scripts", "attributes"),
}


def parse_kind(kind: EventKind | str) -> EventKind:
    """Resolve a kind from its enum member, wire name, or short name.

    Raises:
        ValidationError: If *kind* names no known event kind.
    """
    if isinstance(kind, EventKind):
        return kind
    for member in EventKind:
        if kind in (member.value, member.short_name):
            return member
    raise ValidationError("kind", f"Unknown event kind: {kind!r}")
