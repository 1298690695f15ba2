"""Append-only, hash-chained event journal backed by SQLite.

The journal is the audit trail of every notification the marketplace
emitted.  It never feeds back into marketplace state: the registry and the
proceeds ledger are the source of truth, the journal is their witness.

Each row stores the canonical event JSON, its digest, the seal of the row
before it and a seal over all of that.  Editing, deleting or reordering
rows after the fact is caught by ``verify_chain``; rewriting the whole
chain from the first row is caught by ``verify_against_anchor``.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from bazaar.core.hasher import canonical_json_bytes, seal, sha256_hex
from bazaar.models.events import MarketEvent
from bazaar.models.journal import JournalEntry

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS event_journal (
        id                    INTEGER PRIMARY KEY AUTOINCREMENT,
        entry_id              TEXT NOT NULL UNIQUE,
        event_id              TEXT NOT NULL,
        event_kind            TEXT NOT NULL,
        timestamp_utc         TEXT NOT NULL,
        payload_json          TEXT NOT NULL,
        payload_hash          TEXT NOT NULL,
        previous_entry_hash   TEXT NOT NULL DEFAULT '',
        entry_hash            TEXT NOT NULL UNIQUE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_event_kind ON event_journal(event_kind, id)",
)

_COLUMNS = (
    "entry_id",
    "event_id",
    "event_kind",
    "timestamp_utc",
    "payload_json",
    "payload_hash",
    "previous_entry_hash",
    "entry_hash",
)


class JournalIntegrityError(RuntimeError):
    """The stored chain no longer matches what was sealed."""


class EventJournal:
    """Append-only, hash-chained record of marketplace events.

    Parameters
    ----------
    db_path:
        SQLite database file; parent directories are created as needed.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.row_factory = sqlite3.Row
        return conn

    # -- Writing ----------------------------------------------------------

    def append(self, event: MarketEvent) -> JournalEntry:
        """Seal *event* onto the end of the chain and persist it."""
        payload = canonical_json_bytes(event.model_dump(mode="json"))
        head = self.latest()
        draft = JournalEntry(
            event_id=event.event_id,
            event_kind=event.kind.value,
            payload_json=payload.decode("utf-8"),
            payload_hash=sha256_hex(payload),
            previous_entry_hash=head.entry_hash if head else "",
        )
        entry = draft.model_copy(update={"entry_hash": seal(draft.model_dump(mode="json"))})

        row = entry.model_dump()
        row["timestamp_utc"] = entry.timestamp_utc.isoformat()
        placeholders = ", ".join("?" for _ in _COLUMNS)
        with self._connect() as conn:
            conn.execute(
                f"INSERT INTO event_journal ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
                tuple(row[column] for column in _COLUMNS),
            )
        return entry

    # -- Reading ----------------------------------------------------------

    def latest(self) -> JournalEntry | None:
        """Return the chain head, or None for an empty journal."""
        rows = self._select("ORDER BY id DESC LIMIT 1")
        return rows[0] if rows else None

    def entries(self, event_kind: str | None = None) -> list[JournalEntry]:
        """Return entries in append order, optionally only one kind."""
        if event_kind is None:
            return self._select("ORDER BY id ASC")
        return self._select("WHERE event_kind = ? ORDER BY id ASC", (event_kind,))

    def __len__(self) -> int:
        with self._connect() as conn:
            return conn.execute("SELECT COUNT(*) FROM event_journal").fetchone()[0]

    def _select(self, clause: str, params: tuple = ()) -> list[JournalEntry]:
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {', '.join(_COLUMNS)} FROM event_journal {clause}", params
            ).fetchall()
        return [JournalEntry(**dict(row)) for row in rows]

    # -- Verification -----------------------------------------------------

    def verify_chain(self) -> bool:
        """Recompute every link and seal from the first entry forward.

        Returns True, or raises ``JournalIntegrityError`` at the first
        entry that does not check out.
        """
        link = ""
        for position, entry in enumerate(self.entries(), start=1):
            if entry.previous_entry_hash != link:
                raise JournalIntegrityError(
                    f"Chain broken at position {position} ({entry.entry_id}): "
                    f"links to {entry.previous_entry_hash[:16]!r}, "
                    f"previous seal is {link[:16]!r}."
                )
            if sha256_hex(entry.payload_json.encode("utf-8")) != entry.payload_hash:
                raise JournalIntegrityError(
                    f"Tampered payload at position {position} ({entry.entry_id})."
                )
            if seal(entry.model_dump(mode="json")) != entry.entry_hash:
                raise JournalIntegrityError(
                    f"Tampered entry at position {position} ({entry.entry_id}): "
                    "seal does not match its fields."
                )
            link = entry.entry_hash
        return True

    def export_anchor(self) -> dict[str, Any]:
        """Summarize the current chain for safekeeping outside this database.

        Keys: ``entry_count``, ``root_hash``, ``first_entry_hash``,
        ``timestamp_utc``, ``anchor_hash``.
        """
        entries = self.entries()
        anchor: dict[str, Any] = {
            "entry_count": len(entries),
            "first_entry_hash": entries[0].entry_hash if entries else "",
            "root_hash": entries[-1].entry_hash if entries else "",
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        }
        anchor["anchor_hash"] = (
            sha256_hex(canonical_json_bytes(anchor)) if entries else ""
        )
        return anchor

    def verify_against_anchor(self, anchor: dict[str, Any]) -> bool:
        """Check the journal still extends the chain *anchor* witnessed.

        Entries appended after the anchor are fine; anything lost or
        rewritten up to the anchored head raises ``JournalIntegrityError``.
        """
        entries = self.entries()
        count = anchor.get("entry_count", 0)
        if len(entries) < count:
            raise JournalIntegrityError(
                f"Journal holds {len(entries)} entries; anchor expects at least {count}."
            )
        if not count:
            return True
        if entries[0].entry_hash != anchor.get("first_entry_hash", ""):
            raise JournalIntegrityError(
                "First entry hash mismatch: the chain was rebuilt from the start."
            )
        if entries[count - 1].entry_hash != anchor.get("root_hash", ""):
            raise JournalIntegrityError(
                f"Root hash mismatch at position {count}: history was rewritten."
            )
        return self.verify_chain()
