"""Datastar demo — every patch event kind over SSE.

Each path streams one kind of event.  One-shot endpoints close after
their event; the clock and heartbeat endpoints repeat until the browser
disconnects.

Requires ``pip install starling[templates]`` for the listing template.

Serve ``app`` with any ASGI server.
"""

import time
from pathlib import Path

from starling import (
    StreamConfig,
    execute_script,
    heartbeat,
    merge_fragments,
    merge_signals,
    remove_fragments,
    remove_signals,
    repeat,
    sse_response,
)
from starling.templating.integration import create_environment, template_fragment

TEMPLATES_DIR = Path(__file__).parent / "templates"

config = StreamConfig(template_dir=TEMPLATES_DIR, cors_allow_origin="*")
env = create_environment(config)

_NAMES = ["John", "Jane", "Jim", "Jill"]


def _clock_markup() -> str:
    now = time.time()
    return f'<div id="clock">{time.strftime("%H:%M:%S", time.localtime(now))}:{int(now * 1000) % 1000}</div>'


# ---------------------------------------------------------------------------
# Routes: path -> zero-arg builder of the event list
# ---------------------------------------------------------------------------

ROUTES = {
    "/merge-fragments": lambda: [
        merge_fragments(
            fragment=template_fragment(env, "listing.html", names=_NAMES),
            selector="#listing",
        )
    ],
    "/merge-fragments-repeating": lambda: [
        repeat(merge_fragments(fragment=_clock_markup, selector="#clock"), 1000)
    ],
    "/merge-signals": lambda: [
        merge_signals(signals={"foo": "merged", "nested": {"baz": "merged"}})
    ],
    "/remove-fragments": lambda: [remove_fragments(selector="#content-to-remove")],
    "/remove-signals": lambda: [remove_signals(paths=["foo", "nested.bar"])],
    "/execute-script": lambda: [
        execute_script(
            auto_remove=True,
            attributes=[{"name": "type", "value": "module"}, {"name": "defer", "value": True}],
            scripts=[
                'console.log("Hello from the execute script event!");',
                'alert(document.getElementById("display-in-alert").textContent);',
            ],
        )
    ],
    "/heartbeat": lambda: [heartbeat(1000)],
    "/clock": lambda: [repeat(merge_fragments(fragment=_clock_markup), 150)],
}


async def app(scope, receive, send) -> None:
    """Dispatch GET requests by path to an ``EventStream``."""
    if scope["type"] != "http":
        return
    build = ROUTES.get(scope["path"])
    if build is None:
        await send(
            {
                "type": "http.response.start",
                "status": 404,
                "headers": [(b"content-type", b"text/plain")],
            }
        )
        await send({"type": "http.response.body", "body": b"Not Found"})
        return
    await sse_response(build(), config=config)(scope, receive, send)
