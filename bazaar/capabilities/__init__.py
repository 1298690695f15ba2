"""External capabilities consumed by the marketplace.

The marketplace never owns assets or moves funds itself.  It calls out
through two structural protocols, ``AssetDirectory`` and ``FundsTransfer``.
Production deployments inject adapters for the real asset registry and
payment rail; the in-memory implementations serve tests and the CLI demo.
"""

from bazaar.capabilities.memory import InMemoryAssetDirectory, InMemoryFundsTransfer
from bazaar.capabilities.protocols import AssetDirectory, FundsTransfer

__all__ = [
    "AssetDirectory",
    "FundsTransfer",
    "InMemoryAssetDirectory",
    "InMemoryFundsTransfer",
]
