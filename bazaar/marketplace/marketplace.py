"""Fixed-price listing marketplace with escrowed seller proceeds.

Two maps, each held in an injected ``KeyValueStore``:

- the **listing registry**: ``(collection, item_id) -> {price, seller}``
- the **proceeds ledger**: ``account -> balance``

Buyers pay into escrow; the sale credits the seller's balance and the
seller later pulls it out with ``withdraw_proceeds``.  Value is never
pushed to a counterparty during a sale.

Ordering rules
--------------
Every operation runs its precondition checks first, in a fixed order,
and raises before touching any store.  State is then written, and only
after that is an external capability called:

- ``buy_item`` deletes the listing *before* asking the asset directory to
  transfer the item, so a nested purchase of the same item sees it
  unlisted.
- ``withdraw_proceeds`` zeroes the balance *before* sending funds, so a
  nested withdrawal sees nothing to withdraw.

Every mutating operation holds one shared ``ReentrancyGuard`` for its
whole run, so none can be entered while another is in progress.  Writes made around an external
call go through a ``StoreTransaction``: they are committed only once the
call succeeds, and are discarded if it fails or the process dies first.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from bazaar.capabilities.protocols import AssetDirectory, FundsTransfer
from bazaar.core.errors import (
    AlreadyListed,
    MarketplaceError,
    NoProceeds,
    NotApprovedForMarketplace,
    NotListed,
    NotOwner,
    PriceMustBeAboveZero,
    PriceNotMet,
    TransferFailed,
    ValueOutOfRange,
)
from bazaar.core.guard import ReentrancyGuard
from bazaar.core.stores import InMemoryStore, KeyValueStore, SqliteStore
from bazaar.core.transaction import StoreTransaction
from bazaar.models.events import (
    ItemBought,
    ItemCanceled,
    ItemListed,
    MarketEvent,
    ProceedsWithdrawn,
)
from bazaar.models.listings import ABSENT_LISTING, MAX_VALUE, ItemKey, Listing
from bazaar.routing.dispatcher import EventDispatcher, SinkDispatchError

if TYPE_CHECKING:
    from bazaar.config import BazaarConfig

logger = logging.getLogger(__name__)

DEFAULT_OPERATOR = "bazaar-marketplace"


def _require_value(name: str, value: Any) -> int:
    """Reject anything that is not a native unsigned value."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueOutOfRange(f"{name} must be an integer, got {type(value).__name__}.")
    if value < 0 or value > MAX_VALUE:
        raise ValueOutOfRange(f"{name}={value} is outside [0, 2**256 - 1].")
    return value


def _require_identity(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{name} must be a non-empty identity string.")
    return value


class Marketplace:
    """Listing registry plus proceeds ledger behind one service object.

    Parameters
    ----------
    assets:
        The external ``AssetDirectory`` (ownership, approval, transfer).
    funds:
        The external ``FundsTransfer`` used to pay out proceeds.
    registry:
        Store for active listings.  In-memory if not provided.
    proceeds:
        Store for seller balances.  In-memory if not provided.
    operator:
        The identity the asset directory must approve before an item can
        be listed.
    dispatcher:
        Optional ``EventDispatcher`` that receives every emitted event.

    Examples
    --------
    >>> from bazaar.capabilities import InMemoryAssetDirectory, InMemoryFundsTransfer
    >>> assets = InMemoryAssetDirectory()
    >>> assets.mint("punks", 7, "alice")
    >>> assets.approve("punks", 7, DEFAULT_OPERATOR)
    >>> mp = Marketplace(assets, InMemoryFundsTransfer())
    >>> mp.list_item("punks", 7, 100, caller="alice").price
    100
    >>> mp.buy_item("punks", 7, caller="bob", paid_value=150).seller
    'alice'
    >>> mp.get_proceeds("alice")
    150
    """

    def __init__(
        self,
        assets: AssetDirectory,
        funds: FundsTransfer,
        *,
        registry: KeyValueStore | None = None,
        proceeds: KeyValueStore | None = None,
        operator: str = DEFAULT_OPERATOR,
        dispatcher: EventDispatcher | None = None,
    ) -> None:
        self._assets = assets
        self._funds = funds
        self._registry = registry if registry is not None else InMemoryStore()
        self._proceeds = proceeds if proceeds is not None else InMemoryStore()
        self._operator = _require_identity("operator", operator)
        self._dispatcher = dispatcher
        self._guard = ReentrancyGuard()
        self._events: list[MarketEvent] = []

        # Session counters (this instance only)
        self._sales = 0
        self._withdrawals = 0
        self._total_received = 0
        self._total_paid_out = 0

    @classmethod
    def from_config(
        cls,
        config: BazaarConfig,
        assets: AssetDirectory,
        funds: FundsTransfer,
    ) -> Marketplace:
        """Build a SQLite-backed marketplace wired to the configured sinks.

        Raises ``ProductionConfigError`` if *config* is not fit for production.
        """
        from bazaar.core.journal import EventJournal
        from bazaar.core.production_guard import enforce_production_constraints
        from bazaar.routing.sinks.journal_sink import JournalSink
        from bazaar.routing.sinks.local_file import LocalFileSink

        enforce_production_constraints(config)
        dispatcher = EventDispatcher()
        if config.enable_journal:
            dispatcher.register_sink(JournalSink(EventJournal(config.journal_path)))
        if config.enable_file_events:
            dispatcher.register_sink(LocalFileSink(config.events_path))

        return cls(
            assets,
            funds,
            registry=SqliteStore(config.registry_path, namespace="registry"),
            proceeds=SqliteStore(config.proceeds_path, namespace="proceeds"),
            operator=config.marketplace_operator,
            dispatcher=dispatcher,
        )

    @property
    def operator(self) -> str:
        return self._operator

    @property
    def events(self) -> tuple[MarketEvent, ...]:
        """Every event emitted by this instance, in emission order."""
        return tuple(self._events)

    # -- Listing registry ---------------------------------------------------

    def list_item(
        self, collection: str, item_id: int, price: int, caller: str
    ) -> Listing:
        """Offer an owned, marketplace-approved item at a fixed price.

        Raises
        ------
        Reentrant
            Called from inside another guarded operation.
        AlreadyListed
            The item already has an active listing.
        NotOwner
            *caller* does not own the item.
        PriceMustBeAboveZero
            *price* is zero.
        NotApprovedForMarketplace
            The marketplace operator may not transfer the item.
        """
        key = self._key(collection, item_id)
        _require_value("price", price)
        _require_identity("caller", caller)

        with self._guard("list_item"):
            if self._load(key).is_active:
                raise self._reject(AlreadyListed(collection, item_id))
            self._require_owner(key, caller)
            if price <= 0:
                raise self._reject(
                    PriceMustBeAboveZero("Listing price must be above zero.")
                )
            if not self._assets.is_approved_for_transfer(
                collection, item_id, self._operator
            ):
                raise self._reject(
                    NotApprovedForMarketplace(
                        f"{self._operator} is not approved to transfer {key}."
                    )
                )

            listing = Listing(price=price, seller=caller)
            self._registry.set(key.storage_key(), listing.model_dump())

        logger.info("Listed %s at %d by %s.", key, price, caller)
        self._emit(
            ItemListed(
                seller=caller, collection=collection, item_id=item_id, price=price
            )
        )
        return listing

    def cancel_listing(self, collection: str, item_id: int, caller: str) -> None:
        """Withdraw an active listing.  Ownership is checked first."""
        key = self._key(collection, item_id)
        _require_identity("caller", caller)

        with self._guard("cancel_listing"):
            self._require_owner(key, caller)
            if not self._load(key).is_active:
                raise self._reject(NotListed(collection, item_id))
            self._registry.delete(key.storage_key())

        logger.info("Canceled listing %s by %s.", key, caller)
        self._emit(ItemCanceled(seller=caller, collection=collection, item_id=item_id))

    def update_listing(
        self, collection: str, item_id: int, new_price: int, caller: str
    ) -> Listing:
        """Re-price an active listing.  The listing is checked before ownership."""
        key = self._key(collection, item_id)
        _require_value("new_price", new_price)
        _require_identity("caller", caller)

        with self._guard("update_listing"):
            listing = self._load(key)
            if not listing.is_active:
                raise self._reject(NotListed(collection, item_id))
            self._require_owner(key, caller)
            if new_price <= 0:
                raise self._reject(
                    PriceMustBeAboveZero("Listing price must be above zero.")
                )

            updated = listing.model_copy(update={"price": new_price})
            self._registry.set(key.storage_key(), updated.model_dump())

        logger.info("Re-priced %s from %d to %d.", key, listing.price, new_price)
        self._emit(
            ItemListed(
                seller=updated.seller,
                collection=collection,
                item_id=item_id,
                price=new_price,
            )
        )
        return updated

    def buy_item(
        self, collection: str, item_id: int, caller: str, paid_value: int
    ) -> Listing:
        """Purchase a listed item, escrowing the full payment for the seller.

        Overpayment is credited to the seller; there is no refund path.

        Returns the listing that was filled.

        Raises
        ------
        NotListed
            The item has no active listing.
        Reentrant
            Called from inside another guarded operation.
        PriceNotMet
            *paid_value* is below the listed price.
        TransferFailed
            The asset directory refused the transfer; nothing was changed.
        """
        key = self._key(collection, item_id)
        _require_value("paid_value", paid_value)
        _require_identity("caller", caller)

        listing = self._load(key)
        if not listing.is_active:
            raise self._reject(NotListed(collection, item_id))

        with self._guard("buy_item"):
            if paid_value < listing.price:
                raise self._reject(PriceNotMet(collection, item_id, listing.price))

            with StoreTransaction() as tx:
                self._credit(tx, listing.seller, paid_value)
                tx.delete(self._registry, key.storage_key())
                if not self._assets.transfer(
                    collection, item_id, listing.seller, caller
                ):
                    raise self._reject(
                        TransferFailed(
                            f"Asset transfer of {key} from {listing.seller} "
                            f"to {caller} failed."
                        ),
                        level=logging.ERROR,
                    )

            self._sales += 1
            self._total_received += paid_value

        logger.info(
            "Sold %s to %s for %d (listed at %d).",
            key,
            caller,
            paid_value,
            listing.price,
        )
        self._emit(
            ItemBought(
                buyer=caller, collection=collection, item_id=item_id, price=listing.price
            )
        )
        return listing

    # -- Proceeds ledger ------------------------------------------------------

    def withdraw_proceeds(self, caller: str) -> int:
        """Pay out the caller's whole escrowed balance.

        Returns the amount sent.

        Raises
        ------
        Reentrant
            Called from inside another guarded operation.
        NoProceeds
            The caller's balance is zero.
        TransferFailed
            The funds transfer failed; the balance is restored.
        """
        _require_identity("caller", caller)

        with self._guard("withdraw_proceeds"):
            amount = self.get_proceeds(caller)
            if amount <= 0:
                raise self._reject(NoProceeds(f"{caller} has no proceeds."))

            with StoreTransaction() as tx:
                tx.delete(self._proceeds, caller)
                if not self._funds.send(caller, amount):
                    raise self._reject(
                        TransferFailed(f"Payout of {amount} to {caller} failed."),
                        level=logging.ERROR,
                    )

            self._withdrawals += 1
            self._total_paid_out += amount

        logger.info("Withdrew %d to %s.", amount, caller)
        self._emit(ProceedsWithdrawn(account=caller, amount=amount))
        return amount

    # -- Queries --------------------------------------------------------------

    def get_listing(self, collection: str, item_id: int) -> Listing:
        """Return the listing, or the absent sentinel (price 0, seller "")."""
        return self._load(self._key(collection, item_id))

    def is_listed(self, collection: str, item_id: int) -> bool:
        return self.get_listing(collection, item_id).is_active

    def get_proceeds(self, account: str) -> int:
        """Return the escrowed balance of *account* (0 if none)."""
        return int(self._proceeds.get(account) or 0)

    def listings(self) -> list[tuple[ItemKey, Listing]]:
        """Return every active listing, ordered by storage key."""
        result: list[tuple[ItemKey, Listing]] = []
        for storage_key, data in self._registry.items():
            collection, _, item_id = storage_key.rpartition("#")
            result.append(
                (
                    ItemKey(collection=collection, item_id=int(item_id)),
                    Listing.model_validate(data),
                )
            )
        return result

    def get_stats(self) -> dict[str, int]:
        """Return summary figures.

        ``listings`` and ``escrowed`` are read from the stores; ``sales``,
        ``withdrawals``, ``total_received`` and ``total_paid_out`` count
        activity through this instance only.
        """
        return {
            "listings": len(self._registry.items()),
            "escrowed": sum(int(balance) for _, balance in self._proceeds.items()),
            "sales": self._sales,
            "withdrawals": self._withdrawals,
            "total_received": self._total_received,
            "total_paid_out": self._total_paid_out,
        }

    # -- Internal helpers -----------------------------------------------------

    def _key(self, collection: str, item_id: int) -> ItemKey:
        _require_identity("collection", collection)
        _require_value("item_id", item_id)
        return ItemKey(collection=collection, item_id=item_id)

    def _load(self, key: ItemKey) -> Listing:
        data = self._registry.get(key.storage_key())
        if not data:
            return ABSENT_LISTING
        return Listing.model_validate(data)

    def _require_owner(self, key: ItemKey, caller: str) -> None:
        if self._assets.owner_of(key.collection, key.item_id) != caller:
            raise self._reject(NotOwner(f"{caller} does not own {key}."))

    def _credit(self, tx: StoreTransaction, account: str, amount: int) -> None:
        balance = self.get_proceeds(account) + amount
        if balance > MAX_VALUE:
            raise ValueOutOfRange(f"Proceeds for {account} would overflow.")
        tx.set(self._proceeds, account, balance)

    @staticmethod
    def _reject(
        exc: MarketplaceError, level: int = logging.WARNING
    ) -> MarketplaceError:
        logger.log(level, "Rejected: %s: %s", type(exc).__name__, exc)
        return exc

    def _emit(self, event: MarketEvent) -> None:
        self._events.append(event)
        if self._dispatcher is None:
            return
        try:
            self._dispatcher.dispatch(event)
        except SinkDispatchError:
            # Already committed; notification loss is logged, not rolled back.
            logger.exception(
                "Event %s (%s) was committed but no sink accepted it.",
                event.event_id,
                event.kind.value,
            )
