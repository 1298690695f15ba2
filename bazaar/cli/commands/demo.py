"""``bazaar demo`` — run a scripted sale end-to-end.

Mints items in an in-memory asset directory, then lists, re-prices,
sells and settles them against SQLite-backed stores so the result can be
inspected afterwards with ``bazaar listings``, ``bazaar proceeds`` and
``bazaar journal``.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from bazaar.capabilities import InMemoryAssetDirectory, InMemoryFundsTransfer
from bazaar.cli.render import render_listings, render_stats
from bazaar.config import BazaarConfig
from bazaar.core.errors import MarketplaceError
from bazaar.core.journal import EventJournal
from bazaar.marketplace import Marketplace

console = Console()

SELLER = "alice"
BUYER = "bob"
COLLECTION = "demo-punks"


def demo_cmd(
    data_dir: str = typer.Option(
        ".bazaar/demo",
        "--data-dir",
        "-d",
        help="Directory for the demo state and journal databases.",
    ),
    price: int = typer.Option(100, "--price", help="Listing price of the sold item."),
    paid: int = typer.Option(150, "--paid", help="Value the buyer attaches."),
) -> None:
    """Run a scripted list / buy / withdraw cycle and print each step."""
    base = Path(data_dir)
    config = BazaarConfig(
        registry_path=base / "state.db",
        proceeds_path=base / "state.db",
        journal_path=base / "journal.db",
        events_path=base / "events",
    )

    assets = InMemoryAssetDirectory(operator=config.marketplace_operator)
    funds = InMemoryFundsTransfer()
    market = Marketplace.from_config(config, assets, funds)

    # Fresh item ids per run; the registry persists between demos.
    sold_id = uuid.uuid4().int >> 192
    kept_id = sold_id + 1
    assets.mint(COLLECTION, sold_id, SELLER)
    assets.mint(COLLECTION, kept_id, SELLER)

    console.print()
    console.print(
        Panel(
            f"[bold]Seller:[/bold] {SELLER}   [bold]Buyer:[/bold] {BUYER}\n"
            f"[bold]Operator:[/bold] {market.operator}\n"
            f"[bold]State:[/bold] {config.registry_path}",
            title="[bold]Bazaar demo[/bold]",
            border_style="cyan",
        )
    )

    _step(
        f"List {COLLECTION}#{kept_id} without approval",
        lambda: market.list_item(COLLECTION, kept_id, 10, caller=SELLER),
    )

    assets.approve(COLLECTION, sold_id, market.operator)
    _step(
        f"List {COLLECTION}#{sold_id} at {price}",
        lambda: market.list_item(COLLECTION, sold_id, price, caller=SELLER),
    )
    _step(
        f"{BUYER} pays {paid} for {COLLECTION}#{sold_id}",
        lambda: market.buy_item(COLLECTION, sold_id, caller=BUYER, paid_value=paid),
    )
    console.print(
        f"  owner is now [cyan]{assets.owner_of(COLLECTION, sold_id)}[/cyan], "
        f"{SELLER} has [green]{market.get_proceeds(SELLER)}[/green] in escrow"
    )
    _step(
        f"{SELLER} withdraws proceeds",
        lambda: market.withdraw_proceeds(caller=SELLER),
    )
    _step(
        f"{SELLER} withdraws again",
        lambda: market.withdraw_proceeds(caller=SELLER),
    )

    assets.approve(COLLECTION, kept_id, market.operator)
    _step(
        f"List {COLLECTION}#{kept_id} at 40",
        lambda: market.list_item(COLLECTION, kept_id, 40, caller=SELLER),
    )
    _step(
        f"Re-price {COLLECTION}#{kept_id} to 55",
        lambda: market.update_listing(COLLECTION, kept_id, 55, caller=SELLER),
    )

    console.print()
    console.print(render_listings(market.listings()))
    console.print(render_stats(market.get_stats()))

    journal = EventJournal(config.journal_path)
    journal.verify_chain()
    console.print(
        f"[bold green]Journal chain valid[/bold green] "
        f"({len(journal)} entries, payouts sent: {funds.total_sent()})"
    )


def _step(label: str, action: Callable[[], object]) -> None:
    try:
        result = action()
    except MarketplaceError as exc:
        console.print(f"[yellow]x[/yellow] {label}: [red]{type(exc).__name__}[/red]")
        return
    console.print(f"[green]v[/green] {label}: {result}")
