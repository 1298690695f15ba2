"""Fixed-price listing marketplace with escrowed, pull-based seller proceeds."""

from bazaar.marketplace.marketplace import DEFAULT_OPERATOR, Marketplace

__all__ = ["DEFAULT_OPERATOR", "Marketplace"]
