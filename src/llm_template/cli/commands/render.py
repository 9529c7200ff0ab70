"""Render command for llm-template CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from llm_template.chat import TemplateResult, build_messages
from llm_template.core.config import get_settings
from llm_template.errors import TemplateError
from llm_template.templates.loader import TemplateLoader

console = Console()

ROLE_COLORS = {
    "system": "magenta",
    "user": "blue",
    "assistant": "green",
}


def parse_variables(pairs: list[str] | None, vars_json: str | None) -> dict[str, Any]:
    """Build a render context from ``KEY=VALUE`` pairs and a JSON object.

    Values given as pairs are decoded as JSON when possible, so ``count=3``
    yields an int and ``tags=["a","b"]`` a list; anything else stays a string.
    Pairs override keys from the JSON object.
    """
    context: dict[str, Any] = {}

    if vars_json:
        try:
            data = json.loads(vars_json)
        except json.JSONDecodeError as e:
            raise typer.BadParameter(f"Invalid JSON: {e}", param_hint="--vars-json") from e
        if not isinstance(data, dict):
            raise typer.BadParameter("Must be a JSON object", param_hint="--vars-json")
        context.update(data)

    for pair in pairs or []:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got {pair!r}", param_hint="--var")
        try:
            context[key] = json.loads(raw)
        except json.JSONDecodeError:
            context[key] = raw

    return context


def render(
    name: str = typer.Argument(..., help="Template bundle name."),
    template_dir: Path | None = typer.Option(
        None,
        "--dir",
        "-d",
        help="Template directory. Defaults to the configured directory.",
    ),
    var: list[str] | None = typer.Option(
        None,
        "--var",
        "-v",
        help="Template variable as KEY=VALUE. Repeatable.",
    ),
    vars_json: str | None = typer.Option(
        None,
        "--vars-json",
        help="Template variables as a JSON object.",
    ),
    legacy_schema: bool = typer.Option(
        False,
        "--legacy-schema",
        help="Accept schema.txt.j2 JSON documents.",
    ),
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: text or json.",
    ),
) -> None:
    """Render a template bundle and show the resulting messages and schema.

    Examples:

        llm-template render extract_metadata --var document="Q3 report"

        llm-template render extract_metadata --vars-json '{"tags": ["a"]}' -f json
    """
    context = parse_variables(var, vars_json)

    settings = get_settings()
    if legacy_schema:
        settings = settings.model_copy(update={"legacy_schema_documents": True})
    loader = TemplateLoader(template_directory=template_dir, settings=settings)

    try:
        result = build_messages(name, context, loader=loader)
    except TemplateError as e:
        console.print(f"[red]Error ({e.code}):[/red] {escape(e.message)}", highlight=False)
        if e.suggestion:
            console.print(f"[yellow]Hint:[/yellow] {escape(e.suggestion)}")
        raise typer.Exit(1) from None

    if format == "json":
        typer.echo(json.dumps(to_json(result), indent=2))
    else:
        show_result(result)


def to_json(result: TemplateResult) -> dict[str, Any]:
    """Convert a rendered bundle to a JSON-serializable dict."""
    return {
        "template": result.template_name,
        "messages": [message.to_dict() for message in result.messages],
        "schema": result.schema,
    }


def show_result(result: TemplateResult) -> None:
    """Print rendered messages as panels followed by the schema."""
    if not result.messages:
        console.print("[yellow]No messages rendered.[/yellow]")

    for message in result.messages:
        color = ROLE_COLORS.get(message.role.value, "white")
        console.print(
            Panel(
                Text(message.content),
                title=message.role.value,
                title_align="left",
                border_style=color,
            )
        )

    if result.schema is not None:
        console.print("[bold]Schema:[/bold]")
        typer.echo(json.dumps(result.schema, indent=2))
