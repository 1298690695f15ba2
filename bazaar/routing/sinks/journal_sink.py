"""Journal sink — seals every event into the hash-chained ``EventJournal``."""

from __future__ import annotations

import logging

from bazaar.core.journal import EventJournal
from bazaar.models.events import MarketEvent

logger = logging.getLogger(__name__)


class JournalSink:
    """Routes events to an ``EventJournal``.

    Parameters
    ----------
    journal:
        The journal instance to append into.
    """

    def __init__(self, journal: EventJournal) -> None:
        self._journal = journal

    @property
    def sink_name(self) -> str:
        return "journal"

    def accept(self, event: MarketEvent) -> str:
        """Append the event; return the sealed entry hash."""
        entry = self._journal.append(event)
        logger.debug(
            "JournalSink: sealed %s as %s", event.event_id, entry.entry_hash[:16]
        )
        return entry.entry_hash
