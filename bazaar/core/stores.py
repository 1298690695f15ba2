"""Key-value stores backing the listing registry and the proceeds ledger.

The marketplace never keeps ambient state: both of its maps live in a
``KeyValueStore`` injected at construction.  Values must be
JSON-serializable (listings are stored as dicts, balances as ints).

Two backends ship with the package:

- ``InMemoryStore`` — a plain dict, for tests and short-lived processes.
- ``SqliteStore`` — one namespaced table in a SQLite database (WAL mode),
  so the registry and the ledger may share a single file.
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Structural contract for a mutable string-keyed store."""

    def get(self, key: str) -> Any | None:
        """Return the value for *key*, or ``None`` if absent."""
        ...

    def set(self, key: str, value: Any) -> None:
        """Insert or overwrite *key*."""
        ...

    def delete(self, key: str) -> None:
        """Remove *key*; removing an absent key is a no-op."""
        ...

    def items(self) -> list[tuple[str, Any]]:
        """Return all ``(key, value)`` pairs ordered by key."""
        ...


class InMemoryStore:
    """Dict-backed ``KeyValueStore``."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def items(self) -> list[tuple[str, Any]]:
        return sorted(self._data.items())

    def __len__(self) -> int:
        return len(self._data)


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_KV = """
CREATE TABLE IF NOT EXISTS kv_store (
    namespace   TEXT NOT NULL,
    key         TEXT NOT NULL,
    value_json  TEXT NOT NULL,
    PRIMARY KEY (namespace, key)
);
"""


class SqliteStore:
    """SQLite-backed ``KeyValueStore`` scoped to one namespace.

    Values are stored as JSON text so integers wider than 64 bits survive
    the round trip.

    Outside a transaction every write commits on its own connection.
    ``begin()`` opens a connection holding ``BEGIN IMMEDIATE``; while a
    store is attached to it, reads and writes go through that connection
    and nothing reaches the file until the owner commits.  Stores on the
    same file can be attached to one connection so their writes commit
    together.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    namespace:
        Logical table partition, e.g. ``"registry"`` or ``"proceeds"``.
    """

    def __init__(self, db_path: Path, namespace: str) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._namespace = namespace
        self._bound: sqlite3.Connection | None = None
        self._init_schema()

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(_CREATE_KV)
            conn.commit()

    # -- Transactions -------------------------------------------------------

    def begin(self) -> sqlite3.Connection:
        """Open a connection on this store's file with a write lock held.

        The caller owns the connection and must ``COMMIT`` or ``ROLLBACK``
        it, then close it.
        """
        conn = sqlite3.connect(
            str(self._db_path), check_same_thread=False, isolation_level=None
        )
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("BEGIN IMMEDIATE")
        return conn

    def attach(self, conn: sqlite3.Connection) -> None:
        """Route all access through *conn* until ``detach``."""
        self._bound = conn

    def detach(self) -> None:
        self._bound = None

    @property
    def in_transaction(self) -> bool:
        return self._bound is not None

    def _execute(self, sql: str, params: tuple) -> list[tuple]:
        if self._bound is not None:
            return self._bound.execute(sql, params).fetchall()
        with self._connect() as conn:
            return conn.execute(sql, params).fetchall()

    # -- KeyValueStore --------------------------------------------------------

    def get(self, key: str) -> Any | None:
        rows = self._execute(
            "SELECT value_json FROM kv_store WHERE namespace = ? AND key = ?",
            (self._namespace, key),
        )
        return json.loads(rows[0][0]) if rows else None

    def set(self, key: str, value: Any) -> None:
        self._execute(
            """
            INSERT INTO kv_store (namespace, key, value_json)
            VALUES (?, ?, ?)
            ON CONFLICT(namespace, key) DO UPDATE SET value_json = excluded.value_json
            """,
            (self._namespace, key, json.dumps(value, sort_keys=True)),
        )

    def delete(self, key: str) -> None:
        self._execute(
            "DELETE FROM kv_store WHERE namespace = ? AND key = ?",
            (self._namespace, key),
        )

    def items(self) -> list[tuple[str, Any]]:
        rows = self._execute(
            "SELECT key, value_json FROM kv_store WHERE namespace = ? ORDER BY key ASC",
            (self._namespace,),
        )
        return [(key, json.loads(value_json)) for key, value_json in rows]
