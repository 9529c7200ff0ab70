"""Apply template bundles to chat sessions.

Any object with ``add_message(role=..., content=...)`` and
``with_schema(schema)`` methods can receive a template:

    chat = with_template(client.chat(), "extract_metadata", {"document": text})

Classes can opt in with ``TemplateChatMixin``, and foreign session objects can
be wrapped with ``TemplateChat``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, Self, TypeVar, runtime_checkable

import logfire

from llm_template.errors import TemplateNotFoundError
from llm_template.templates.loader import TemplateLoader
from llm_template.templates.models import RenderedMessage, Role, TemplateBundle
from llm_template.templates.schema import build_schema_document


@runtime_checkable
class ChatSession(Protocol):
    """Capabilities a chat session needs to receive a template."""

    def add_message(self, *, role: str, content: str) -> Any: ...

    def with_schema(self, schema: dict[str, Any]) -> Any: ...


ChatT = TypeVar("ChatT", bound=ChatSession)


@dataclass
class TemplateResult:
    """Rendered messages and schema for a bundle, independent of any session."""

    template_name: str
    messages: list[RenderedMessage] = field(default_factory=list)
    schema: dict[str, Any] | None = None


def _require_bundle(loader: TemplateLoader, template_name: str) -> TemplateBundle:
    bundle = loader.locate(template_name)
    if not loader.exists(bundle):
        logfire.error(
            "Template not found",
            template=bundle.name,
            template_directory=str(bundle.root_directory),
        )
        raise TemplateNotFoundError(
            f"Template '{bundle.name}' not found in {bundle.root_directory}",
            template_name=bundle.name,
        )
    return bundle


def _schema_for(
    loader: TemplateLoader,
    bundle: TemplateBundle,
    context: Mapping[str, Any] | None,
) -> dict[str, Any] | None:
    if Role.SCHEMA not in loader.available_roles(bundle):
        return None
    artifact = loader.resolve_schema(bundle, context)
    if artifact is None:
        return None
    return build_schema_document(artifact, bundle.name)


def with_template(
    chat: ChatT,
    template_name: str,
    context: Mapping[str, Any] | None = None,
    *,
    loader: TemplateLoader | None = None,
) -> ChatT:
    """Render a bundle into a chat session.

    Messages are added in system, user, assistant order as each role is
    rendered, so messages added before a failing role stay on the session.
    The schema, if the bundle has one, is attached once after the messages.

    Args:
        chat: Session receiving the messages and schema
        template_name: Bundle name under the template directory
        context: Variables available to the templates and schema script
        loader: Loader to use (defaults to the configured template directory)

    Returns:
        The same chat session, for chaining

    Raises:
        TemplateNotFoundError: If the bundle does not exist
        TemplateError: If rendering or schema resolution fails
    """
    loader = loader or TemplateLoader()
    bundle = _require_bundle(loader, template_name)

    logfire.info(
        "Applying template",
        template=bundle.name,
        context_keys=sorted(map(str, context or {})),
    )

    for message in loader.iter_messages(bundle, context):
        chat.add_message(role=message.role.value, content=message.content)

    schema = _schema_for(loader, bundle, context)
    if schema is not None:
        chat.with_schema(schema)

    return chat


def build_messages(
    template_name: str,
    context: Mapping[str, Any] | None = None,
    *,
    loader: TemplateLoader | None = None,
) -> TemplateResult:
    """Render a bundle without a chat session.

    Raises:
        TemplateNotFoundError: If the bundle does not exist
        TemplateError: If rendering or schema resolution fails
    """
    loader = loader or TemplateLoader()
    bundle = _require_bundle(loader, template_name)

    result = TemplateResult(template_name=bundle.name)
    result.messages.extend(loader.iter_messages(bundle, context))

    result.schema = _schema_for(loader, bundle, context)

    return result


class TemplateChatMixin:
    """Adds ``with_template`` to a class implementing ``ChatSession``."""

    template_loader: TemplateLoader | None = None

    def with_template(
        self,
        template_name: str,
        context: Mapping[str, Any] | None = None,
        **variables: Any,
    ) -> Self:
        """Render a bundle into this session.

        Args:
            template_name: Bundle name under the template directory
            context: Variables available to the templates and schema script
            **variables: Extra variables, taking precedence over ``context``

        Returns:
            This session, for chaining

        Raises:
            TemplateNotFoundError: If the bundle does not exist
            TemplateError: If rendering or schema resolution fails
        """
        merged = {**(context or {}), **variables}
        return with_template(self, template_name, merged, loader=self.template_loader)


class TemplateChat(TemplateChatMixin):
    """Wraps a foreign chat session so it gains ``with_template``.

    Unknown attributes are forwarded to the wrapped session, so the adapter
    can be used in its place:

        chat = TemplateChat(client.chat()).with_template("summarize", text=doc)
        response = chat.ask("Go")
    """

    def __init__(self, session: Any, loader: TemplateLoader | None = None) -> None:
        required = ("add_message", "with_schema")
        if not all(callable(getattr(session, attr, None)) for attr in required):
            raise TypeError(
                f"{type(session).__name__} does not provide add_message() and with_schema()"
            )
        self.session = session
        self.template_loader = loader

    def add_message(self, *, role: str, content: str) -> Any:
        return self.session.add_message(role=role, content=content)

    def with_schema(self, schema: dict[str, Any]) -> Any:
        return self.session.with_schema(schema)

    def __getattr__(self, name: str) -> Any:
        # Only called for attributes not found on the adapter itself
        if name == "session":
            raise AttributeError(name)
        return getattr(self.session, name)


__all__ = [
    "ChatSession",
    "TemplateChat",
    "TemplateChatMixin",
    "TemplateResult",
    "build_messages",
    "with_template",
]
