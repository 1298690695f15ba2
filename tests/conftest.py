"""Shared test fixtures for Bazaar."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from bazaar.capabilities import InMemoryAssetDirectory, InMemoryFundsTransfer
from bazaar.core.journal import EventJournal
from bazaar.marketplace import DEFAULT_OPERATOR, Marketplace
from bazaar.routing.dispatcher import EventDispatcher
from bazaar.routing.sinks.journal_sink import JournalSink

SELLER = "0xalice"
BUYER = "0xbob"
STRANGER = "0xmallory"
COLLECTION = "punks"
ITEM = 1


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test databases."""
    return tmp_path


@pytest.fixture
def assets() -> InMemoryAssetDirectory:
    """Asset directory that re-checks marketplace approval on transfer."""
    directory = InMemoryAssetDirectory(operator=DEFAULT_OPERATOR)
    directory.mint(COLLECTION, ITEM, SELLER)
    return directory


@pytest.fixture
def funds() -> InMemoryFundsTransfer:
    return InMemoryFundsTransfer()


@pytest.fixture
def market(assets: InMemoryAssetDirectory, funds: InMemoryFundsTransfer) -> Marketplace:
    """Provide a fresh in-memory marketplace."""
    return Marketplace(assets, funds)


@pytest.fixture
def journal(tmp_dir: Path) -> EventJournal:
    """Provide a fresh EventJournal backed by a temp SQLite database."""
    return EventJournal(tmp_dir / "journal.db")


@pytest.fixture
def journaled_market(
    assets: InMemoryAssetDirectory,
    funds: InMemoryFundsTransfer,
    journal: EventJournal,
) -> Marketplace:
    """Marketplace whose events are sealed into ``journal``."""
    dispatcher = EventDispatcher()
    dispatcher.register_sink(JournalSink(journal))
    return Marketplace(assets, funds, dispatcher=dispatcher)


@pytest.fixture
def list_item(
    market: Marketplace, assets: InMemoryAssetDirectory
) -> Callable[..., None]:
    """Factory fixture: mint (if needed), approve and list an item."""

    def _factory(
        item_id: int = ITEM,
        price: int = 100,
        seller: str = SELLER,
        collection: str = COLLECTION,
    ) -> None:
        if not assets.owner_of(collection, item_id):
            assets.mint(collection, item_id, seller)
        assets.approve(collection, item_id, DEFAULT_OPERATOR)
        market.list_item(collection, item_id, price, caller=seller)

    return _factory
