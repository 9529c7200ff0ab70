"""Error types raised while resolving and rendering prompt templates."""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error codes for programmatic handling."""

    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    RENDER_FAILED = "RENDER_FAILED"
    SCHEMA_DEPENDENCY_MISSING = "SCHEMA_DEPENDENCY_MISSING"
    SCHEMA_RESOLUTION_FAILED = "SCHEMA_RESOLUTION_FAILED"
    SCHEMA_DOCUMENT_INVALID = "SCHEMA_DOCUMENT_INVALID"


class TemplateError(Exception):
    """Base class for all template errors.

    Every error carries a code, the human-readable message, and when known
    the template (bundle) name and role it relates to.
    """

    code: ErrorCode = ErrorCode.RENDER_FAILED

    def __init__(
        self,
        message: str,
        template_name: str | None = None,
        role: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.template_name = template_name
        self.role = role
        self.suggestion = suggestion


class TemplateNotFoundError(TemplateError):
    """The bundle directory is missing or holds no recognized role files."""

    code = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateRenderError(TemplateError):
    """Evaluating a role's template source failed."""

    code = ErrorCode.RENDER_FAILED


class SchemaDependencyError(TemplateError):
    """A schema script exists but the schema builder library is not installed."""

    code = ErrorCode.SCHEMA_DEPENDENCY_MISSING


class SchemaResolutionError(TemplateError):
    """A schema script ran but did not produce a usable schema builder."""

    code = ErrorCode.SCHEMA_RESOLUTION_FAILED


class SchemaDocumentError(TemplateError):
    """A legacy declarative schema document could not be parsed."""

    code = ErrorCode.SCHEMA_DOCUMENT_INVALID


__all__ = [
    "ErrorCode",
    "SchemaDependencyError",
    "SchemaDocumentError",
    "SchemaResolutionError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRenderError",
]
