"""Rich renderables shared by the CLI commands."""

from __future__ import annotations

from rich.table import Table

from bazaar.models.journal import JournalEntry
from bazaar.models.listings import ItemKey, Listing


def render_listings(listings: list[tuple[ItemKey, Listing]]) -> Table:
    table = Table(title="Active Listings")
    table.add_column("Collection", style="cyan")
    table.add_column("Item", justify="right")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Seller")
    for key, listing in listings:
        table.add_row(key.collection, str(key.item_id), str(listing.price), listing.seller)
    if not listings:
        table.caption = "[dim]No active listings.[/dim]"
    return table


def render_stats(stats: dict[str, int]) -> Table:
    table = Table(title="Marketplace Stats", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    for name, value in stats.items():
        table.add_row(name.replace("_", " "), str(value))
    return table


def render_journal(entries: list[JournalEntry], limit: int) -> Table:
    table = Table(title=f"Event Journal (last {min(limit, len(entries))})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("Timestamp (UTC)")
    table.add_column("Entry Hash", style="dim")
    start = max(0, len(entries) - limit)
    for index, entry in enumerate(entries[start:], start=start + 1):
        table.add_row(
            str(index),
            entry.event_kind,
            entry.timestamp_utc.strftime("%Y-%m-%d %H:%M:%S"),
            entry.entry_hash[:16] + "...",
        )
    return table
