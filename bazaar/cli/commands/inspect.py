"""Read-only inspection commands: ``listing``, ``listings``, ``proceeds``, ``journal``.

All of them open the persisted state without mutating it.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from bazaar.capabilities import InMemoryAssetDirectory, InMemoryFundsTransfer
from bazaar.cli.render import render_journal, render_listings, render_stats
from bazaar.core.journal import EventJournal, JournalIntegrityError
from bazaar.core.stores import SqliteStore
from bazaar.marketplace import Marketplace

console = Console()

_STATE_OPTION = typer.Option(
    ".bazaar/state.db", "--state", "-s", help="Path to the state SQLite database."
)


def _open_marketplace(state_db: str) -> Marketplace:
    db_path = Path(state_db)
    if not db_path.exists():
        console.print(f"[bold red]State not found:[/bold red] {state_db}")
        raise typer.Exit(code=1)
    # Queries never call the capabilities.
    return Marketplace(
        InMemoryAssetDirectory(),
        InMemoryFundsTransfer(),
        registry=SqliteStore(db_path, namespace="registry"),
        proceeds=SqliteStore(db_path, namespace="proceeds"),
    )


def listing_cmd(
    collection: str = typer.Argument(..., help="Collection identifier."),
    item_id: int = typer.Argument(..., help="Item identifier."),
    state_db: str = _STATE_OPTION,
) -> None:
    """Show the listing for one item."""
    listing = _open_marketplace(state_db).get_listing(collection, item_id)
    if not listing.is_active:
        console.print(f"[dim]{collection}#{item_id} is not listed.[/dim]")
        raise typer.Exit(code=1)
    console.print(
        f"[bold]{collection}#{item_id}[/bold]  price=[green]{listing.price}[/green]"
        f"  seller=[cyan]{listing.seller}[/cyan]"
    )


def listings_cmd(state_db: str = _STATE_OPTION) -> None:
    """Show every active listing and summary figures."""
    market = _open_marketplace(state_db)
    console.print(render_listings(market.listings()))
    console.print(render_stats(market.get_stats()))


def proceeds_cmd(
    account: str = typer.Argument(..., help="Seller identity."),
    state_db: str = _STATE_OPTION,
) -> None:
    """Show the escrowed balance of an account."""
    balance = _open_marketplace(state_db).get_proceeds(account)
    console.print(f"[bold]{account}[/bold] proceeds: [green]{balance}[/green]")


def journal_cmd(
    journal_db: str = typer.Option(
        ".bazaar/journal.db", "--journal", "-j", help="Path to the journal database."
    ),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of entries to show."),
    verify: bool = typer.Option(
        False, "--verify", "-V", help="Verify the hash chain before displaying."
    ),
) -> None:
    """Show recent journal entries, optionally verifying the chain."""
    db_path = Path(journal_db)
    if not db_path.exists():
        console.print(f"[bold red]Journal not found:[/bold red] {journal_db}")
        raise typer.Exit(code=1)

    journal = EventJournal(db_path)
    if verify:
        try:
            journal.verify_chain()
        except JournalIntegrityError as exc:
            console.print(f"[bold red]Chain verification failed:[/bold red] {exc}")
            raise typer.Exit(code=2) from exc
        console.print("[bold green]Chain valid.[/bold green]")

    console.print(render_journal(journal.entries(), limit))
