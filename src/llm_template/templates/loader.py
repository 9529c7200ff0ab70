"""Template bundle loader.

A bundle is a directory under the configured template directory:

    prompts/extract_metadata/
        system.txt.j2
        user.txt.j2
        assistant.txt.j2
        schema.py

Bundles are resolved fresh on every call; nothing is cached.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import logfire
from jinja2 import TemplateError as JinjaTemplateError

from llm_template.core.config import TemplateSettings, get_settings
from llm_template.errors import TemplateRenderError
from llm_template.templates import schema as schema_module
from llm_template.templates.models import (
    MESSAGE_ROLES,
    RenderedMessage,
    Role,
    TemplateBundle,
)
from llm_template.templates.renderer import TemplateRenderer, get_renderer

BundleRef = TemplateBundle | str | os.PathLike[str]


class TemplateLoader:
    """Locates template bundles and renders their roles.

    Usage:
        loader = TemplateLoader(template_directory=Path("prompts"))
        bundle = loader.locate("extract_metadata")
        if loader.exists(bundle):
            system = loader.render(bundle, "system", {"document": text})
    """

    def __init__(
        self,
        template_directory: Path | str | None = None,
        settings: TemplateSettings | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            template_directory: Directory holding bundles. Defaults to the
                configured ``template_directory``.
            settings: Settings to use instead of the process-wide configuration
            renderer: Renderer for role templates (shared default if omitted)
        """
        self._settings = settings
        self._template_directory = Path(template_directory) if template_directory else None
        self._renderer = renderer or get_renderer()

    @property
    def settings(self) -> TemplateSettings:
        return self._settings or get_settings()

    @property
    def template_directory(self) -> Path:
        if self._template_directory is not None:
            return self._template_directory
        return Path(self.settings.template_directory)

    def locate(self, name: BundleRef) -> TemplateBundle:
        """Resolve a bundle name to its location. Does not touch the filesystem."""
        if isinstance(name, TemplateBundle):
            return name
        bundle_name = os.fspath(name) if isinstance(name, os.PathLike) else str(name)
        return TemplateBundle(name=bundle_name, root_directory=self.template_directory)

    def available_roles(self, bundle: BundleRef) -> list[Role]:
        """List the roles a bundle provides, in canonical order.

        Text roles are present when their ``<role>.txt.j2`` file exists. The
        schema role is present when ``schema.py`` exists; a ``schema.txt.j2``
        document only counts when legacy schema documents are enabled.
        """
        bundle = self.locate(bundle)
        if not bundle.path.is_dir():
            return []

        roles = [role for role in MESSAGE_ROLES if bundle.role_file(role).is_file()]
        if self._has_schema(bundle):
            roles.append(Role.SCHEMA)
        return roles

    def exists(self, bundle: BundleRef) -> bool:
        """Check if a bundle directory exists and provides at least one role."""
        bundle = self.locate(bundle)
        return bundle.path.is_dir() and bool(self.available_roles(bundle))

    def render(
        self,
        bundle: BundleRef,
        role: Role | str,
        context: Mapping[str, Any] | None = None,
    ) -> Any:
        """Render one role of a bundle.

        Args:
            bundle: Bundle or bundle name
            role: Role to render
            context: Variables available to the template

        Returns:
            Rendered text for message roles, a schema artifact for the schema
            role, or None if the role is unsupported or absent

        Raises:
            TemplateRenderError: If rendering a message role fails
        """
        bundle = self.locate(bundle)
        parsed = Role.parse(role)
        if parsed is None:
            return None
        if parsed is Role.SCHEMA:
            return self.resolve_schema(bundle, context)
        return self._render_text(bundle, parsed, context)

    def resolve_schema(
        self,
        bundle: BundleRef,
        context: Mapping[str, Any] | None = None,
    ) -> Any:
        """Resolve the bundle's schema artifact.

        ``schema.py`` takes precedence. In legacy mode a ``schema.txt.j2``
        JSON document is used when no script exists.

        Returns:
            A pydantic ``TypeAdapter`` or model instance, a JSON schema dict
            (legacy mode), or None when the bundle has no schema

        Raises:
            SchemaDependencyError: If the script exists but pydantic is missing
            SchemaResolutionError: If the script yields no usable schema
            SchemaDocumentError: If a legacy document is not valid JSON
        """
        bundle = self.locate(bundle)

        if bundle.schema_script.is_file():
            return schema_module.load_schema(bundle.schema_script, bundle.name, context)

        if self.settings.legacy_schema_documents and bundle.schema_document.is_file():
            text = self._render_file(bundle, Role.SCHEMA, bundle.schema_document, context)
            logfire.debug("Schema resolved from legacy document", template=bundle.name)
            return schema_module.parse_schema_document(text, bundle.name)

        return None

    def iter_messages(
        self,
        bundle: BundleRef,
        context: Mapping[str, Any] | None = None,
    ) -> Iterator[RenderedMessage]:
        """Render message roles lazily in conversation order.

        Yields only roles that are present and render to non-blank text.
        """
        bundle = self.locate(bundle)
        available = self.available_roles(bundle)

        for role in MESSAGE_ROLES:
            if role not in available:
                continue
            content = self._render_text(bundle, role, context)
            if content is None or not content.strip():
                logfire.debug("Skipping empty role", template=bundle.name, role=role.value)
                continue
            yield RenderedMessage(role=role, content=content.strip())

    def list_templates(self) -> list[str]:
        """List bundle names directly under the template directory.

        Returns:
            Sorted names of directories that provide at least one role
        """
        root = self.template_directory
        if not root.is_dir():
            return []
        return sorted(entry.name for entry in root.iterdir() if self.exists(entry.name))

    def _has_schema(self, bundle: TemplateBundle) -> bool:
        if bundle.schema_script.is_file():
            return True
        return self.settings.legacy_schema_documents and bundle.schema_document.is_file()

    def _render_text(
        self,
        bundle: TemplateBundle,
        role: Role,
        context: Mapping[str, Any] | None,
    ) -> str | None:
        template_file = bundle.role_file(role)
        if not template_file.is_file():
            return None
        return self._render_file(bundle, role, template_file, context)

    def _render_file(
        self,
        bundle: TemplateBundle,
        role: Role,
        template_file: Path,
        context: Mapping[str, Any] | None,
    ) -> str:
        label = f"{bundle.name}/{template_file.name}"
        try:
            source = template_file.read_text(encoding="utf-8")
            rendered = self._renderer.render(source, context)
        except Exception as e:
            # Includes errors raised by expressions inside the template itself
            logfire.error(
                "Template rendering failed", template=label, role=role.value, error=str(e)
            )
            detail = str(e) if isinstance(e, JinjaTemplateError) else f"{type(e).__name__}: {e}"
            raise TemplateRenderError(
                f"Failed to render template '{label}': {detail}",
                template_name=bundle.name,
                role=role.value,
            ) from e

        logfire.debug("Rendered template role", template=bundle.name, role=role.value)
        return rendered
