"""Marketplace failure conditions.

Every failure is terminal for the call that raised it.  Precondition
failures are raised before any state is touched; capability failures are
raised after the call's writes have been rolled back.
"""

from __future__ import annotations


class MarketplaceError(RuntimeError):
    """Base class for every named marketplace condition."""


class AlreadyListed(MarketplaceError):
    """The item already has an active listing."""

    def __init__(self, collection: str, item_id: int) -> None:
        super().__init__(f"Item {collection}#{item_id} is already listed.")
        self.collection = collection
        self.item_id = item_id


class NotListed(MarketplaceError):
    """The item has no active listing."""

    def __init__(self, collection: str, item_id: int) -> None:
        super().__init__(f"Item {collection}#{item_id} is not listed.")
        self.collection = collection
        self.item_id = item_id


class NotOwner(MarketplaceError):
    """The caller does not own the item."""


class PriceMustBeAboveZero(MarketplaceError):
    """A listing price must be strictly positive."""


class NotApprovedForMarketplace(MarketplaceError):
    """The marketplace may not transfer the item on the owner's behalf."""


class PriceNotMet(MarketplaceError):
    """The attached payment is below the listed price."""

    def __init__(self, collection: str, item_id: int, price: int) -> None:
        super().__init__(
            f"Price not met for {collection}#{item_id}: requires {price}."
        )
        self.collection = collection
        self.item_id = item_id
        self.price = price


class NoProceeds(MarketplaceError):
    """The caller has no escrowed balance to withdraw."""


class TransferFailed(MarketplaceError):
    """An external asset or funds transfer reported failure."""


class Reentrant(MarketplaceError):
    """A guarded operation was entered while another was in progress."""


class ValueOutOfRange(MarketplaceError, ValueError):
    """An amount or identifier does not fit the native unsigned value type."""
