"""In-memory capability implementations.

``InMemoryAssetDirectory`` models a minimal item registry with
single-item approvals and operator-wide approvals.  ``InMemoryFundsTransfer``
records every payout.  Both accept optional hooks that run during the
external call, which is how tests simulate a counterparty calling back
into the marketplace mid-operation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class InMemoryAssetDirectory:
    """Dict-backed asset registry.

    Parameters
    ----------
    operator:
        When set, ``transfer`` re-checks that this operator is approved for
        the item, so an approval revoked after listing surfaces as a failed
        transfer at purchase time.
    on_transfer:
        Optional callback invoked with ``(collection, item_id, from_account,
        to_account)`` before ownership changes.
    """

    def __init__(
        self,
        operator: str | None = None,
        on_transfer: Callable[[str, int, str, str], None] | None = None,
    ) -> None:
        self.operator = operator
        self._owners: dict[tuple[str, int], str] = {}
        self._approvals: dict[tuple[str, int], str] = {}
        self._operators: dict[str, set[str]] = {}
        self.on_transfer = on_transfer

    # -- Registry administration -------------------------------------------

    def mint(self, collection: str, item_id: int, owner: str) -> None:
        """Create an item owned by *owner*."""
        key = (collection, item_id)
        if key in self._owners:
            raise ValueError(f"Item {collection}#{item_id} already exists.")
        self._owners[key] = owner

    def approve(self, collection: str, item_id: int, operator: str) -> None:
        """Approve *operator* to transfer one item."""
        self._approvals[(collection, item_id)] = operator

    def revoke(self, collection: str, item_id: int) -> None:
        """Clear the single-item approval."""
        self._approvals.pop((collection, item_id), None)

    def set_approval_for_all(self, owner: str, operator: str, approved: bool) -> None:
        """Grant or revoke *operator* over every item *owner* holds."""
        operators = self._operators.setdefault(owner, set())
        if approved:
            operators.add(operator)
        else:
            operators.discard(operator)

    # -- AssetDirectory protocol ---------------------------------------------

    def owner_of(self, collection: str, item_id: int) -> str:
        return self._owners.get((collection, item_id), "")

    def is_approved_for_transfer(
        self, collection: str, item_id: int, operator: str
    ) -> bool:
        owner = self.owner_of(collection, item_id)
        if not owner:
            return False
        return (
            self._approvals.get((collection, item_id)) == operator
            or operator in self._operators.get(owner, set())
        )

    def transfer(
        self, collection: str, item_id: int, from_account: str, to_account: str
    ) -> bool:
        if self.owner_of(collection, item_id) != from_account:
            logger.warning(
                "Refused transfer of %s#%s: %s is not the owner.",
                collection,
                item_id,
                from_account,
            )
            return False
        if self.operator is not None and not self.is_approved_for_transfer(
            collection, item_id, self.operator
        ):
            logger.warning(
                "Refused transfer of %s#%s: operator %s is not approved.",
                collection,
                item_id,
                self.operator,
            )
            return False
        if self.on_transfer is not None:
            self.on_transfer(collection, item_id, from_account, to_account)
        self._owners[(collection, item_id)] = to_account
        # Single-item approvals do not survive a change of owner.
        self._approvals.pop((collection, item_id), None)
        return True


class InMemoryFundsTransfer:
    """Payment primitive that records payouts.

    Parameters
    ----------
    fail:
        When ``True`` every ``send`` reports failure.
    on_send:
        Optional callback invoked with ``(to, amount)`` before the payout is
        recorded.
    """

    def __init__(
        self,
        fail: bool = False,
        on_send: Callable[[str, int], None] | None = None,
    ) -> None:
        self.fail = fail
        self.on_send = on_send
        self.payouts: list[tuple[str, int]] = []

    def send(self, to: str, amount: int) -> bool:
        if self.on_send is not None:
            self.on_send(to, amount)
        if self.fail:
            logger.warning("Payout of %d to %s failed.", amount, to)
            return False
        self.payouts.append((to, amount))
        return True

    def total_sent(self, to: str | None = None) -> int:
        """Sum of recorded payouts, optionally for one account."""
        return sum(amount for dest, amount in self.payouts if to is None or dest == to)
