"""Template bundle loading and rendering."""

from llm_template.templates.loader import TemplateLoader
from llm_template.templates.models import RenderedMessage, Role, TemplateBundle
from llm_template.templates.renderer import TemplateRenderer, get_renderer, render_string
from llm_template.templates.schema import schema_document

__all__ = [
    "RenderedMessage",
    "Role",
    "TemplateBundle",
    "TemplateLoader",
    "TemplateRenderer",
    "get_renderer",
    "render_string",
    "schema_document",
]
