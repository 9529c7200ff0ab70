"""Jinja2 renderer for prompt template sources."""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from jinja2 import StrictUndefined
from jinja2.sandbox import SandboxedEnvironment


class TemplateRenderer:
    """Renders template source text against a context mapping.

    Templates use Jinja2 syntax: ``{{ expr }}`` for interpolation and
    ``{% if %}``/``{% for %}`` blocks for control flow. Referencing a
    variable that is not in the context raises ``jinja2.UndefinedError``
    unless the reference is guarded with ``is defined``.

    The environment is sandboxed and has no loader, so templates cannot
    include other files or reach unsafe attributes.
    """

    def __init__(self) -> None:
        self._env = SandboxedEnvironment(  # nosec B701 - generating raw text prompts, not HTML
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, source: str, context: Mapping[str, Any] | None = None) -> str:
        """Render template source with the given context.

        Args:
            source: Template text
            context: Variables to expose to the template by name

        Returns:
            Rendered text

        Raises:
            jinja2.TemplateError: If the template is invalid or evaluation fails
        """
        template = self._env.from_string(source)
        return template.render(self.symbol_table(context))

    @staticmethod
    def symbol_table(context: Mapping[str, Any] | None) -> dict[str, Any]:
        """Build the name -> value table exposed to templates.

        Keys are coerced to strings; the caller's mapping is never modified.
        """
        if not context:
            return {}
        return {str(key): value for key, value in context.items()}


@lru_cache(maxsize=1)
def get_renderer() -> TemplateRenderer:
    """Get the shared renderer instance."""
    return TemplateRenderer()


def render_string(source: str, context: Mapping[str, Any] | None = None) -> str:
    """Convenience function to render template source.

    Args:
        source: Template text
        context: Variables to pass to the template

    Returns:
        Rendered text
    """
    return get_renderer().render(source, context)
