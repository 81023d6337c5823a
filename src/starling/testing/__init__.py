"""Test utilities for starling streams.

Provides an ASGI SSE client, a frame parser, and a manual clock for
driving the scheduler in virtual time::

    from starling.testing import ManualClock, SSEClient, parse_frames
"""

from starling.testing.client import SSEClient
from starling.testing.clock import ManualClock, ManualTimer
from starling.testing.sse import Frame, SSETestResult, parse_frames

__all__ = [
    "Frame",
    "ManualClock",
    "ManualTimer",
    "SSEClient",
    "SSETestResult",
    "parse_frames",
]
