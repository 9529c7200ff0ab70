"""Data models for template bundles."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

TEMPLATE_SUFFIX = ".txt.j2"
SCHEMA_SCRIPT_NAME = "schema.py"


class Role(StrEnum):
    """Recognized bundle roles."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    SCHEMA = "schema"

    @classmethod
    def parse(cls, value: str | Role) -> Role | None:
        """Return the matching role, or None for unsupported names."""
        try:
            return cls(str(value))
        except ValueError:
            return None

    @property
    def file_name(self) -> str:
        """Name of the text template backing this role."""
        return f"{self.value}{TEMPLATE_SUFFIX}"


# Conversation order used when emitting messages
MESSAGE_ROLES: tuple[Role, ...] = (Role.SYSTEM, Role.USER, Role.ASSISTANT)


@dataclass(frozen=True)
class TemplateBundle:
    """A named directory holding a template's role files."""

    name: str
    root_directory: Path

    @property
    def path(self) -> Path:
        return self.root_directory / self.name

    @property
    def schema_script(self) -> Path:
        return self.path / SCHEMA_SCRIPT_NAME

    @property
    def schema_document(self) -> Path:
        """Legacy declarative schema document (schema.txt.j2)."""
        return self.path / Role.SCHEMA.file_name

    def role_file(self, role: Role) -> Path:
        return self.path / role.file_name


@dataclass(frozen=True)
class RenderedMessage:
    """A rendered conversational message."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}
