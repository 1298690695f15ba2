"""Sink protocol for marketplace event routing.

All sinks implement the ``BaseSink`` protocol: a ``sink_name`` property
and an ``accept(event)`` method.  The dispatcher calls ``accept`` on every
registered sink for every emitted event.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from bazaar.models.events import MarketEvent


@runtime_checkable
class BaseSink(Protocol):
    """Protocol that every event sink must implement.

    Attributes
    ----------
    sink_name : str
        A unique human-readable identifier for this sink instance
        (e.g. ``"local_file"``, ``"journal"``).
    """

    @property
    def sink_name(self) -> str:
        """Return the unique name of this sink."""
        ...

    def accept(self, event: MarketEvent) -> None:
        """Accept and process an event.

        Critical failures may raise; the dispatcher logs them and
        continues to the next sink.
        """
        ...
