"""Bazaar: peer-to-peer fixed-price listings with escrowed seller proceeds.

  - Listing registry keyed by (collection, item_id)
  - Pull-based proceeds ledger: sales credit escrow, sellers withdraw
  - Effects-before-external-call ordering plus a shared reentrancy guard
  - All-or-nothing operations: a failed transfer rolls back every write
  - Injected key-value stores (in-memory or SQLite)
  - Hash-chained event journal and pluggable notification sinks
"""

__version__ = "0.1.0"
__description__ = "Fixed-price asset listings with escrowed, pull-based seller proceeds"

from bazaar.marketplace import Marketplace
from bazaar.cli.app import app as cli

__all__ = ["Marketplace", "cli", "__version__"]
