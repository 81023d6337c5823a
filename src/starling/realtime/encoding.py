"""Datastar line encoder.

Turns one event's fields into an SSE block::

    event: datastar-merge-signals
    retry: 5000
    data: signals {"foo":"bar"}
    <blank line>

The encoder is pure: it takes the kind and a mapping of field values
and returns text.  Fragment and signal generators are invoked here, so
their side effects belong to whoever called ``render()``; any exception
they raise propagates unchanged.
"""

import json
import re
from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from typing import Any

from starling.errors import ValidationError
from starling.minify import minify_html
from starling.realtime.kinds import FIELD_ORDER, EventKind, parse_kind

# SSE ends a line at CRLF, LF or a lone CR
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def render_event(
    kind: EventKind | str,
    fields: Mapping[str, Any],
    *,
    minify: Callable[[str], str] = minify_html,
) -> str:
    """Encode *fields* as a blank-line-terminated block for *kind*.

    Fields that are absent or ``None`` are omitted.  ``retry`` always
    follows the ``event:`` line; everything else follows the kind's
    fixed field order.  Fragments and scripts are split into one
    ``data:`` line per line of text.

    Raises:
        ValidationError: If a single-line value (selector, path,
            attribute, merge mode, retry) contains a line break.
    """
    kind = parse_kind(kind)
    lines = [f"event: {kind.value}"]

    retry = fields.get("retry")
    if retry is not None:
        lines.append(f"retry: {_single_line('retry', str(retry))}")

    for name in FIELD_ORDER[kind]:
        value = fields.get(name)
        if value is None:
            continue
        match name:
            case "fragment":
                markup = minify(_resolve_fragment(value))
                lines.extend(f"data: fragments {line}" for line in _LINE_BREAK.split(markup))
            case "signals":
                lines.append(f"data: signals {_to_json(_resolve_signals(value))}")
            case "paths":
                lines.extend(f"data: paths {_single_line(name, str(path))}" for path in value)
            case "attributes":
                for attr in value:
                    attr_name, attr_value = _attribute_pair(attr)
                    pair = f"{attr_name} {_format_value(attr_value)}"
                    lines.append(f"data: attributes {_single_line(name, pair)}")
            case "scripts":
                # One line per line of code so embedded newlines cannot end the block
                lines.extend(
                    f"data: script {line}"
                    for script in value
                    for line in _LINE_BREAK.split(script)
                )
            case _:
                lines.append(f"data: {name} {_single_line(name, _format_value(value))}")

    return "\n".join(lines) + "\n\n"


def render_comment(text: str) -> str:
    """Encode *text* as an SSE comment block (ignored by event handlers)."""
    return "".join(f": {line}\n" for line in _LINE_BREAK.split(text)) + "\n"


def _resolve_fragment(fragment: str | Callable[[], str]) -> str:
    if callable(fragment):
        return fragment()
    return fragment


def _resolve_signals(signals: Any) -> Any:
    """Evaluate a signals generator and its top-level generator values."""
    if callable(signals):
        signals = signals()
    if isinstance(signals, Mapping):
        return {key: value() if callable(value) else value for key, value in signals.items()}
    return signals


def _attribute_pair(attr: Any) -> tuple[str, Any]:
    if isinstance(attr, Mapping):
        return attr["name"], attr["value"]
    if isinstance(attr, Sequence) and not isinstance(attr, str):
        name, value = attr
        return name, value
    return attr.name, attr.value


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def _format_value(value: Any) -> str:
    """Natural text form of a field value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Mapping | list | tuple):
        return _to_json(value)
    return str(value)


def _single_line(field: str, text: str) -> str:
    """Reject a value that would end its ``data:`` line early."""
    if "\n" in text or "\r" in text:
        msg = f"{field} must not contain line breaks, got {text!r}"
        raise ValidationError(field, msg)
    return text
