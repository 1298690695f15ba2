"""All-or-nothing writes across several key-value stores.

``StoreTransaction`` makes every write inside its block take effect
together or not at all:

- ``SqliteStore`` writes run on one ``BEGIN IMMEDIATE`` connection per
  database file and are committed when the block exits cleanly.  If the
  block raises, or the process dies before the commit, SQLite discards
  them.
- Other stores get an undo log: the prior value of every key written is
  recorded and replayed newest-first if the block raises.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any

from bazaar.core.stores import KeyValueStore, SqliteStore

logger = logging.getLogger(__name__)


class StoreTransaction:
    """Atomic writer over one or more ``KeyValueStore`` instances.

    Examples
    --------
    >>> from bazaar.core.stores import InMemoryStore
    >>> store = InMemoryStore({"a": 1})
    >>> try:
    ...     with StoreTransaction() as tx:
    ...         tx.set(store, "a", 2)
    ...         raise RuntimeError("abort")
    ... except RuntimeError:
    ...     pass
    >>> store.get("a")
    1
    """

    def __init__(self) -> None:
        self._undo: list[tuple[KeyValueStore, str, Any | None]] = []
        self._connections: dict[Path, sqlite3.Connection] = {}
        self._attached: list[SqliteStore] = []

    def set(self, store: KeyValueStore, key: str, value: Any) -> None:
        self._track(store, key)
        store.set(key, value)

    def delete(self, store: KeyValueStore, key: str) -> None:
        self._track(store, key)
        store.delete(key)

    def _track(self, store: KeyValueStore, key: str) -> None:
        if not isinstance(store, SqliteStore):
            self._undo.append((store, key, store.get(key)))
            return
        if any(attached is store for attached in self._attached):
            return
        if store.in_transaction:
            raise RuntimeError(
                f"Store {store.namespace!r} is already attached to another transaction."
            )
        path = store.db_path.resolve()
        conn = self._connections.get(path)
        if conn is None:
            conn = store.begin()
            self._connections[path] = conn
        store.attach(conn)
        self._attached.append(store)

    def commit(self) -> None:
        for conn in self._connections.values():
            conn.execute("COMMIT")
        self._undo.clear()

    def rollback(self) -> None:
        """Discard SQLite writes and restore every other touched key."""
        for conn in self._connections.values():
            if conn.in_transaction:
                conn.execute("ROLLBACK")
        while self._undo:
            store, key, previous = self._undo.pop()
            if previous is None:
                store.delete(key)
            else:
                store.set(key, previous)

    def _release(self) -> None:
        for store in self._attached:
            store.detach()
        for conn in self._connections.values():
            conn.close()
        self._attached.clear()
        self._connections.clear()
        self._undo.clear()

    def __enter__(self) -> "StoreTransaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc_type is None:
                try:
                    self.commit()
                except sqlite3.Error:
                    self.rollback()
                    raise
            elif self._undo or self._connections:
                logger.info(
                    "Rolling back %d in-memory write(s) and %d SQLite store(s) after %s.",
                    len(self._undo),
                    len(self._attached),
                    exc_type.__name__,
                )
                self.rollback()
        finally:
            self._release()
        return False
