"""Core llm-template functionality."""

from llm_template.core.config import (
    TemplateSettings,
    configure,
    default_template_directory,
    get_settings,
    reset_configuration,
)

__all__ = [
    "TemplateSettings",
    "configure",
    "default_template_directory",
    "get_settings",
    "reset_configuration",
]
