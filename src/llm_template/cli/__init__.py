"""llm-template CLI for previewing template bundles."""

from __future__ import annotations

import logfire
import typer
from rich.console import Console

from llm_template import __version__
from llm_template.cli.commands import bundles, render
from llm_template.core.config import get_settings

app = typer.Typer(
    name="llm-template",
    help="Render prompt template bundles",
    no_args_is_help=True,
)
console = Console()

app.command(name="render")(render.render)
app.command(name="list")(bundles.list_bundles)


@app.callback()
def setup() -> None:
    """Configure logging before running a command."""
    settings = get_settings()
    logfire.configure(
        service_name="llm-template",
        send_to_logfire="if-token-present",
        console=logfire.ConsoleOptions(min_log_level=settings.log_level.lower()),
    )


@app.command()
def version() -> None:
    """Show the CLI version."""
    console.print(f"llm-template version {__version__}")


def main() -> None:
    """Main entry point for the CLI."""
    app()


__all__ = ["app", "main"]
