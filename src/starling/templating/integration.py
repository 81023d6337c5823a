"""Kida-backed fragment generators.

Fragment markup usually comes from templates.  These helpers return
zero-argument callables that render a template (or one block of it) on
every call, so they can be passed straight to ``merge_fragments``::

    env = create_environment(StreamConfig(template_dir="templates"))
    listing = template_fragment(env, "listing.html", names=names)
    merge_fragments(fragment=listing, selector="#listing")

Context values that are themselves zero-argument callables are called
on each render, which keeps a repeating fragment live.

Requires the optional ``kida`` template engine::

    pip install starling[templates]
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from starling.config import StreamConfig
from starling.errors import ConfigurationError

if TYPE_CHECKING:
    from kida import Environment


def _require_kida() -> Any:
    try:
        import kida
    except ImportError:
        msg = (
            "Template fragments require the kida template engine. "
            "Install it with: pip install starling[templates]"
        )
        raise ConfigurationError(msg) from None
    return kida


def create_environment(config: StreamConfig) -> Environment:
    """Create a kida Environment loading templates from ``config.template_dir``."""
    kida = _require_kida()
    return kida.Environment(
        loader=kida.FileSystemLoader(str(config.template_dir)),
        autoescape=config.autoescape,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
    )


def _resolve_context(context: dict[str, Any]) -> dict[str, Any]:
    return {key: value() if callable(value) else value for key, value in context.items()}


def template_fragment(env: Environment, name: str, /, **context: Any) -> Callable[[], str]:
    """A fragment generator rendering the whole template *name*."""

    def render() -> str:
        return env.get_template(name).render(_resolve_context(context))

    return render


def block_fragment(
    env: Environment, name: str, block: str, /, **context: Any
) -> Callable[[], str]:
    """A fragment generator rendering only *block* of template *name*."""

    def render() -> str:
        return env.get_template(name).render_block(block, _resolve_context(context))

    return render


def string_fragment(env: Environment, source: str, /, **context: Any) -> Callable[[], str]:
    """A fragment generator rendering an inline template source.  For prototyping."""
    template = env.from_string(source)

    def render() -> str:
        return template.render(_resolve_context(context))

    return render
