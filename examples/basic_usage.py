"""Example of applying a template bundle to a chat session.

Run from the repository root:

    python examples/basic_usage.py
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import llm_template


class MockChat(llm_template.TemplateChatMixin):
    """Stands in for an LLM client's chat session."""

    def __init__(self) -> None:
        self.messages: list[dict[str, str]] = []
        self.schema: dict[str, Any] | None = None

    def add_message(self, *, role: str, content: str) -> None:
        self.messages.append({"role": role, "content": content})

    def with_schema(self, schema: dict[str, Any]) -> MockChat:
        self.schema = schema
        return self


def main() -> None:
    llm_template.configure(template_directory=Path(__file__).parent / "prompts")

    chat = MockChat().with_template(
        "extract_metadata",
        document="Q3 Financial Report: Revenue increased 15% to $2.3M.",
        additional_context="Focus on financial metrics and future outlook",
        focus_areas=["revenue", "challenges", "projections"],
    )

    for i, message in enumerate(chat.messages, start=1):
        print(f"{i}. [{message['role'].upper()}] {message['content'][:80]}")
    print(json.dumps(chat.schema, indent=2))


if __name__ == "__main__":
    main()
