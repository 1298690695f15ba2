"""Main Typer application — imports and registers all CLI commands.

Entry point: ``bazaar`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from bazaar.cli.commands.demo import demo_cmd
from bazaar.cli.commands.inspect import (
    journal_cmd,
    listing_cmd,
    listings_cmd,
    proceeds_cmd,
)
from bazaar.config import config
from bazaar.core.production_guard import (
    ProductionConfigError,
    enforce_production_constraints,
)

app = typer.Typer(
    name="bazaar",
    help="Bazaar: fixed-price asset listings with escrowed seller proceeds.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Override BAZAAR_LOG_LEVEL for this invocation."
    ),
) -> None:
    """Configure logging and check production settings before any command runs."""
    logging.basicConfig(
        level=(log_level or config.log_level).upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=config.debug)],
        force=True,
    )
    try:
        enforce_production_constraints(config)
    except ProductionConfigError as exc:
        Console(stderr=True).print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1) from exc


# Register subcommands
app.command(name="demo", help="Run a scripted list / buy / withdraw cycle.")(demo_cmd)
app.command(name="listing", help="Show the listing for one item.")(listing_cmd)
app.command(name="listings", help="Show all active listings.")(listings_cmd)
app.command(name="proceeds", help="Show an account's escrowed proceeds.")(proceeds_cmd)
app.command(name="journal", help="Show and verify the event journal.")(journal_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
