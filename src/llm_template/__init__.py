"""Render prompt template bundles into chat sessions."""

from llm_template.chat import (
    ChatSession,
    TemplateChat,
    TemplateChatMixin,
    TemplateResult,
    build_messages,
    with_template,
)
from llm_template.core.config import (
    TemplateSettings,
    configure,
    get_settings,
    reset_configuration,
)
from llm_template.errors import (
    ErrorCode,
    SchemaDependencyError,
    SchemaDocumentError,
    SchemaResolutionError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRenderError,
)
from llm_template.templates import (
    RenderedMessage,
    Role,
    TemplateBundle,
    TemplateLoader,
    TemplateRenderer,
    render_string,
    schema_document,
)

__version__ = "0.1.0"

__all__ = [
    "ChatSession",
    "ErrorCode",
    "RenderedMessage",
    "Role",
    "SchemaDependencyError",
    "SchemaDocumentError",
    "SchemaResolutionError",
    "TemplateBundle",
    "TemplateChat",
    "TemplateChatMixin",
    "TemplateError",
    "TemplateLoader",
    "TemplateNotFoundError",
    "TemplateRenderError",
    "TemplateRenderer",
    "TemplateResult",
    "TemplateSettings",
    "__version__",
    "build_messages",
    "configure",
    "get_settings",
    "render_string",
    "reset_configuration",
    "schema_document",
    "with_template",
]
