"""Template configuration using pydantic-settings."""

from __future__ import annotations

import sys
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Any, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Directory (relative to a detected web framework root) that holds bundles
FRAMEWORK_PROMPTS_DIR = Path("app") / "prompts"
DEFAULT_PROMPTS_DIR = "prompts"


def detect_framework_root() -> Path | None:
    """Return the root directory of a host web framework, if one is loaded.

    Only a configured Django project is recognized; its ``BASE_DIR`` setting
    is taken as the project root.
    """
    django_conf = sys.modules.get("django.conf")
    if django_conf is None:
        return None

    settings = django_conf.settings
    if not settings.configured:
        return None

    base_dir = getattr(settings, "BASE_DIR", None)
    return Path(base_dir) if base_dir else None


def default_template_directory() -> Path:
    """Compute the default bundle root for the current process."""
    framework_root = detect_framework_root()
    if framework_root is not None:
        return framework_root / FRAMEWORK_PROMPTS_DIR
    return Path.cwd() / DEFAULT_PROMPTS_DIR


class TemplateSettings(BaseSettings):
    """Template settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LLM_TEMPLATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_assignment=True,
        extra="ignore",
    )

    template_directory: Path | None = Field(
        default=None,
        description="Directory holding template bundles. Derived from the environment if unset.",
    )
    legacy_schema_documents: bool = Field(
        default=False,
        description="Accept schema.txt.j2 declarative JSON documents when no schema.py exists.",
    )
    log_level: str = "INFO"

    @model_validator(mode="after")
    def resolve_template_directory(self) -> Self:
        """Fill in the default template directory when none was given."""
        if self.template_directory is None:
            # Bypass validate_assignment to avoid re-entering this validator
            object.__setattr__(self, "template_directory", default_template_directory())
        return self


@lru_cache
def get_settings() -> TemplateSettings:
    """Get cached settings instance."""
    return TemplateSettings()


def configure(
    mutator: Callable[[TemplateSettings], Any] | None = None,
    **overrides: Any,
) -> TemplateSettings:
    """Apply settings to the process-wide configuration.

    Args:
        mutator: Optional callable receiving the settings object to modify in place
        **overrides: Settings fields to assign, e.g. ``template_directory="prompts"``

    Returns:
        The updated settings instance

    Example:
        >>> configure(template_directory="/srv/app/prompts")
        >>> configure(lambda s: setattr(s, "legacy_schema_documents", True))
    """
    settings = get_settings()
    for key, value in overrides.items():
        if key not in TemplateSettings.model_fields:
            raise AttributeError(f"Unknown template setting: {key!r}")
        setattr(settings, key, value)
    if mutator is not None:
        mutator(settings)
    return settings


def reset_configuration() -> None:
    """Drop the cached settings so the next access recomputes defaults.

    This is a process-wide mutation; callers sharing a process are not
    isolated from each other.
    """
    get_settings.cache_clear()
