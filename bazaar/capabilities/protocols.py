"""Capability protocols the marketplace calls out through.

Any object with matching methods satisfies these protocols; no
inheritance is required.  Capabilities report refusal by returning
``False``; exceptions they raise propagate to the marketplace caller.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class AssetDirectory(Protocol):
    """Protocol for the external item registry."""

    def owner_of(self, collection: str, item_id: int) -> str:
        """Return the identity that currently owns the item."""
        ...

    def is_approved_for_transfer(
        self, collection: str, item_id: int, operator: str
    ) -> bool:
        """Return ``True`` if *operator* may transfer the item for its owner."""
        ...

    def transfer(
        self, collection: str, item_id: int, from_account: str, to_account: str
    ) -> bool:
        """Move the item; return ``False`` if the registry refused."""
        ...


@runtime_checkable
class FundsTransfer(Protocol):
    """Protocol for the external payment primitive."""

    def send(self, to: str, amount: int) -> bool:
        """Send *amount* to *to*; return ``False`` on failure."""
        ...


