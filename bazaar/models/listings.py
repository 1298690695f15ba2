"""Listing models — fixed-price offers keyed by (collection, item_id).

A listing whose ``price`` is zero is the *absent* sentinel.  The registry
never stores such a listing: deletion removes the key outright so a stale
``seller`` can never be mistaken for a live offer.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Native value-of-currency width of the host ledger (unsigned 256-bit).
VALUE_BITS = 256
MAX_VALUE = 2**VALUE_BITS - 1


class ItemKey(BaseModel):
    """Address of a single transferable asset."""

    model_config = ConfigDict(frozen=True)

    collection: str = Field(min_length=1)
    item_id: int = Field(ge=0, le=MAX_VALUE)

    def storage_key(self) -> str:
        """Return the flat key used by the listing registry store."""
        return f"{self.collection}#{self.item_id}"

    def __str__(self) -> str:
        return f"{self.collection}#{self.item_id}"


class Listing(BaseModel):
    """An active offer to sell one item at a fixed price.

    Examples
    --------
    >>> Listing().is_active
    False
    >>> Listing(price=100, seller="0xabc").is_active
    True
    """

    model_config = ConfigDict(frozen=True)

    price: int = Field(default=0, ge=0, le=MAX_VALUE)
    seller: str = ""

    @property
    def is_active(self) -> bool:
        return self.price > 0


ABSENT_LISTING = Listing()
