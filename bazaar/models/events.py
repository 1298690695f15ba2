"""Marketplace notification events.

Every successful mutating operation emits exactly one event.  Events are
frozen Pydantic models so they can be journaled, hashed and written to
sinks as-is.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    """The notification types emitted by the marketplace."""

    ITEM_LISTED = "item_listed"
    ITEM_CANCELED = "item_canceled"
    ITEM_BOUGHT = "item_bought"
    PROCEEDS_WITHDRAWN = "proceeds_withdrawn"


class MarketEvent(BaseModel):
    """Base fields shared by all marketplace events."""

    model_config = ConfigDict(frozen=True)

    schema_version: str = "2026-10"
    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    kind: EventKind


class ItemListed(MarketEvent):
    """A listing was created, or re-listed at a new price."""

    kind: EventKind = EventKind.ITEM_LISTED
    seller: str
    collection: str
    item_id: int
    price: int


class ItemCanceled(MarketEvent):
    """A listing was withdrawn by its owner."""

    kind: EventKind = EventKind.ITEM_CANCELED
    seller: str
    collection: str
    item_id: int


class ItemBought(MarketEvent):
    """An item changed hands; ``price`` is the listed price."""

    kind: EventKind = EventKind.ITEM_BOUGHT
    buyer: str
    collection: str
    item_id: int
    price: int


class ProceedsWithdrawn(MarketEvent):
    """A seller's escrowed balance was paid out."""

    kind: EventKind = EventKind.PROCEEDS_WITHDRAWN
    account: str
    amount: int


# Registry for deserialization by kind
EVENT_TYPE_MAP: dict[EventKind, type[MarketEvent]] = {
    EventKind.ITEM_LISTED: ItemListed,
    EventKind.ITEM_CANCELED: ItemCanceled,
    EventKind.ITEM_BOUGHT: ItemBought,
    EventKind.PROCEEDS_WITHDRAWN: ProceedsWithdrawn,
}
