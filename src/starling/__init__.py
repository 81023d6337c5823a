"""Starling — Datastar patch events over Server-Sent Events.

Builds typed patch events (merge/remove fragments, merge/remove signals,
execute script), encodes them in Datastar's SSE line format, and
streams them over ASGI with optional periodic repetition.

Basic usage::

    from starling import merge_fragments, repeat, sse_response

    clock = merge_fragments(fragment=lambda: f"<div id='clock'>{now()}</div>")
    app = sse_response([repeat(clock, 1000)])

Template fragments (``pip install starling[templates]``)::

    from starling.templating.integration import create_environment, template_fragment
"""

from importlib import import_module

__version__ = "0.1.0"
__all__ = [
    "Comment",
    "ConfigurationError",
    "EventKind",
    "EventStream",
    "ExecuteScript",
    "MergeFragments",
    "MergeMode",
    "MergeSignals",
    "QueueChannel",
    "RemoveFragments",
    "RemoveSignals",
    "RenderError",
    "RepeatingEvent",
    "ScriptAttribute",
    "StarlingError",
    "StreamClosedError",
    "StreamConfig",
    "StreamScheduler",
    "ValidationError",
    "create",
    "execute_script",
    "heartbeat",
    "merge_fragments",
    "merge_signals",
    "minify_html",
    "remove_fragments",
    "remove_signals",
    "render_event",
    "repeat",
    "sse_response",
]

_LAZY_IMPORTS: dict[str, str] = {
    "Comment": "starling.realtime.events",
    "ExecuteScript": "starling.realtime.events",
    "MergeFragments": "starling.realtime.events",
    "MergeSignals": "starling.realtime.events",
    "RemoveFragments": "starling.realtime.events",
    "RemoveSignals": "starling.realtime.events",
    "RepeatingEvent": "starling.realtime.events",
    "ScriptAttribute": "starling.realtime.events",
    "heartbeat": "starling.realtime.events",
    "repeat": "starling.realtime.events",
    "EventKind": "starling.realtime.kinds",
    "MergeMode": "starling.realtime.kinds",
    "create": "starling.realtime.factory",
    "execute_script": "starling.realtime.factory",
    "merge_fragments": "starling.realtime.factory",
    "merge_signals": "starling.realtime.factory",
    "remove_fragments": "starling.realtime.factory",
    "remove_signals": "starling.realtime.factory",
    "render_event": "starling.realtime.encoding",
    "QueueChannel": "starling.realtime.channel",
    "StreamScheduler": "starling.realtime.scheduler",
    "EventStream": "starling.realtime.sse",
    "sse_response": "starling.realtime.sse",
    "StreamConfig": "starling.config",
    "minify_html": "starling.minify",
    "ConfigurationError": "starling.errors",
    "RenderError": "starling.errors",
    "StarlingError": "starling.errors",
    "StreamClosedError": "starling.errors",
    "ValidationError": "starling.errors",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import starling`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    return getattr(import_module(module_name), name)
