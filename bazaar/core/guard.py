"""Call-depth lock shared by the marketplace's externally-calling operations.

Every mutating marketplace operation calls out to an external capability
while its call is still open.  Holding one ``ReentrancyGuard`` across all
of them means none can be re-entered, nor entered from inside another,
until the outer call returns.
"""

from __future__ import annotations

import logging

from bazaar.core.errors import Reentrant

logger = logging.getLogger(__name__)


class ReentrancyGuard:
    """Per-instance call-depth flag.

    Use as a context manager; the lock is released on every exit path,
    including exceptions.

    Examples
    --------
    >>> guard = ReentrancyGuard()
    >>> with guard:
    ...     guard.locked
    True
    >>> guard.locked
    False
    """

    def __init__(self) -> None:
        self._depth = 0
        self._holder = ""

    @property
    def locked(self) -> bool:
        return self._depth > 0

    def enter(self, operation: str = "") -> None:
        if self._depth:
            logger.warning(
                "Rejected re-entrant %s while %s is in progress.",
                operation or "call",
                self._holder or "another call",
            )
            raise Reentrant(
                f"Re-entrant {operation or 'call'} rejected: "
                f"{self._holder or 'another call'} is in progress."
            )
        self._depth += 1
        self._holder = operation

    def exit(self) -> None:
        self._depth = max(0, self._depth - 1)
        if not self._depth:
            self._holder = ""

    def __call__(self, operation: str) -> "_Held":
        """Return a context manager naming the guarded *operation*."""
        return _Held(self, operation)

    def __enter__(self) -> "ReentrancyGuard":
        self.enter()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.exit()


class _Held:
    def __init__(self, guard: ReentrancyGuard, operation: str) -> None:
        self._guard = guard
        self._operation = operation

    def __enter__(self) -> ReentrancyGuard:
        self._guard.enter(self._operation)
        return self._guard

    def __exit__(self, *exc_info: object) -> None:
        self._guard.exit()
