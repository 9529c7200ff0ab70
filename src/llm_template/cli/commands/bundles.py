"""List command for llm-template CLI."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from llm_template.core.config import get_settings
from llm_template.templates.loader import TemplateLoader

console = Console()


def list_bundles(
    template_dir: Path | None = typer.Option(
        None,
        "--dir",
        "-d",
        help="Template directory. Defaults to the configured directory.",
    ),
    legacy_schema: bool = typer.Option(
        False,
        "--legacy-schema",
        help="Report schema.txt.j2 JSON documents as schemas.",
    ),
) -> None:
    """List template bundles and the roles each one provides."""
    settings = get_settings()
    if legacy_schema:
        settings = settings.model_copy(update={"legacy_schema_documents": True})
    loader = TemplateLoader(template_directory=template_dir, settings=settings)

    names = loader.list_templates()
    if not names:
        console.print(f"[yellow]No templates found in {loader.template_directory}[/yellow]")
        return

    table = create_bundle_table(loader, names)
    console.print(table)


def create_bundle_table(loader: TemplateLoader, names: list[str]) -> Table:
    """Create a table of bundles and their roles."""
    table = Table(title=f"Templates in {loader.template_directory}")
    table.add_column("Template", style="cyan", no_wrap=True)
    table.add_column("Roles", style="bold")

    for name in names:
        roles = loader.available_roles(name)
        table.add_row(name, ", ".join(role.value for role in roles))

    return table
