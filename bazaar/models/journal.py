"""Event journal entry model — append-only, hash-chained.

Each entry records one marketplace event:
- ``payload_hash`` seals the canonical event body
- ``previous_entry_hash`` links to the entry before it
- ``entry_hash`` seals the entry itself
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class JournalEntry(BaseModel):
    """A single sealed record in the event journal."""

    model_config = ConfigDict(frozen=True)

    entry_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_id: str
    event_kind: str
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    payload_json: str  # canonical JSON of the event
    payload_hash: str = ""
    previous_entry_hash: str = ""
    entry_hash: str = ""  # computed on append, seals this entry
