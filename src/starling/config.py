"""Stream configuration.

StreamConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class StreamConfig:
    """Stream configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = StreamConfig(debug=True, cors_allow_origin="*")
    """

    # Render failures become visible SSE comments instead of being dropped
    debug: bool = False

    # Response headers
    cors_allow_origin: str | None = None

    # Templates (requires kida)
    template_dir: str | Path = "templates"
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True

    # Logging: compact, full, or minimal (STARLING_TRACEBACK wins when set)
    traceback_style: str = "compact"
