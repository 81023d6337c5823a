"""Error logging for event streams.

A failing fragment or signal generator must not take down a stream, so
the scheduler logs the failure and moves on.  This module decides how
much of the traceback to show.

Verbosity comes from the ``STARLING_TRACEBACK`` environment variable
(``compact``, ``full``, ``minimal``), falling back to
``StreamConfig.traceback_style``:

- **compact** (default): error summary plus application frames only
- **full**: the complete Python traceback via ``logger.exception``
- **minimal**: a single line with the failing location
"""

from __future__ import annotations

import logging
import os
import traceback as _traceback
from typing import Any

logger = logging.getLogger("starling.stream")


def _is_app_frame(filename: str) -> bool:
    """True if the frame is from the application (not stdlib/site-packages/starling)."""
    if "site-packages" in filename:
        return False
    if filename.startswith("<"):
        return False
    if os.path.dirname(__file__) in filename:
        return False
    stdlib_prefix = os.path.dirname(os.__file__)
    return not filename.startswith(stdlib_prefix)


def format_compact_traceback(exc: BaseException) -> str:
    """Format an error with application frames only.

    Falls back to the last three frames when none of them belong to the
    application.
    """
    parts: list[str] = [f"{type(exc).__name__}: {exc}"]

    tb = exc.__traceback__
    frames = _traceback.extract_tb(tb) if tb else []
    app_frames = [f for f in frames if _is_app_frame(f.filename)]
    display_frames = app_frames if app_frames else frames[-3:]

    if display_frames:
        parts.append("  Trace (app frames):")
        for frame in display_frames[-5:]:
            parts.append(f"    {frame.filename}:{frame.lineno} in {frame.name}")
            if frame.line:
                parts.append(f"      {frame.line.strip()}")

    return "\n".join(parts)


def format_minimal_error(exc: BaseException) -> str:
    """One-line error summary."""
    tb = exc.__traceback__
    frames = _traceback.extract_tb(tb) if tb else []
    last = frames[-1] if frames else None
    location = f" at {last.filename}:{last.lineno}" if last else ""
    return f"{type(exc).__name__}{location}: {exc}"


def describe_event(event: Any) -> str:
    """Short label for an event in log lines (``datastar-merge-fragments every 1000ms``)."""
    kind = getattr(event, "kind", None)
    label = kind.value if kind is not None else type(event).__name__
    frequency = getattr(event, "frequency_ms", None)
    if frequency is not None:
        return f"{label} every {frequency}ms"
    return label


def log_error(exc: BaseException, event: Any = None, *, style: str = "compact") -> None:
    """Log a render or stream failure with the configured traceback verbosity.

    Args:
        exc: The exception raised while rendering or delivering.
        event: The event being rendered, used to label the log line.
            ``None`` for failures outside a render.
        style: Verbosity used when ``STARLING_TRACEBACK`` is not set.
    """
    prefix = f"Render failed ({describe_event(event)})" if event is not None else "Stream error"
    traceback_style = os.environ.get("STARLING_TRACEBACK", style).lower()

    if traceback_style == "full":
        logger.error(prefix, exc_info=exc)
    elif traceback_style == "minimal":
        logger.error("%s: %s", prefix, format_minimal_error(exc))
    else:
        logger.error("%s\n%s", prefix, format_compact_traceback(exc))
