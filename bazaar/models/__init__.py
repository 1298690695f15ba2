"""Bazaar data models — all Pydantic v2, all frozen (immutable)."""

from bazaar.models.events import (
    EVENT_TYPE_MAP,
    EventKind,
    ItemBought,
    ItemCanceled,
    ItemListed,
    MarketEvent,
    ProceedsWithdrawn,
)
from bazaar.models.journal import JournalEntry
from bazaar.models.listings import ABSENT_LISTING, MAX_VALUE, ItemKey, Listing

__all__ = [
    # listings
    "ItemKey",
    "Listing",
    "ABSENT_LISTING",
    "MAX_VALUE",
    # events
    "EventKind",
    "MarketEvent",
    "ItemListed",
    "ItemCanceled",
    "ItemBought",
    "ProceedsWithdrawn",
    "EVENT_TYPE_MAP",
    # journal
    "JournalEntry",
]
