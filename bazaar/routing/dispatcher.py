"""Fan-out of committed marketplace events to notification sinks.

The dispatcher runs after the marketplace has committed a change, so it
can never undo one.  A sink that raises is logged and skipped; only when
no sink at all accepts an event does ``dispatch`` raise.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bazaar.models.events import MarketEvent

if TYPE_CHECKING:
    from bazaar.routing.sinks import BaseSink

logger = logging.getLogger(__name__)


class SinkDispatchError(RuntimeError):
    """No registered sink accepted the event."""

    def __init__(self, event_id: str, failures: dict[str, Exception]) -> None:
        detail = "; ".join(f"{name}: {exc}" for name, exc in failures.items())
        super().__init__(f"Event {event_id} rejected by every sink ({detail})")
        self.event_id = event_id
        self.failures = failures


class EventDispatcher:
    """Delivers each event to every registered sink, in registration order.

    Sinks are keyed by ``sink_name``; registering a second sink under a
    name already in use replaces the first.

    Usage
    -----
    >>> dispatcher = EventDispatcher()
    >>> dispatcher.register_sink(JournalSink(journal))
    >>> dispatcher.dispatch(ItemListed(...))
    ['journal']
    """

    def __init__(self) -> None:
        self._by_name: dict[str, BaseSink] = {}

    def register_sink(self, sink: BaseSink) -> None:
        replaced = self._by_name.get(sink.sink_name)
        self._by_name[sink.sink_name] = sink
        if replaced is None:
            logger.info("Sink %s registered.", sink.sink_name)
        elif replaced is not sink:
            logger.warning("Sink %s replaced by a new instance.", sink.sink_name)

    def unregister_sink(self, sink: BaseSink) -> None:
        if self._by_name.get(sink.sink_name) is sink:
            del self._by_name[sink.sink_name]
            logger.info("Sink %s unregistered.", sink.sink_name)

    @property
    def registered_sinks(self) -> list[BaseSink]:
        return list(self._by_name.values())

    def dispatch(self, event: MarketEvent) -> list[str]:
        """Offer *event* to each sink and return the names that accepted it.

        Raises ``SinkDispatchError`` when sinks are registered but every
        one of them failed.
        """
        if not self._by_name:
            logger.debug("Event %s has no sinks to reach.", event.event_id)
            return []

        accepted: list[str] = []
        failures: dict[str, Exception] = {}
        for name, sink in self._by_name.items():
            try:
                sink.accept(event)
            except Exception as exc:  # noqa: BLE001
                logger.error("Sink %s failed on event %s: %s", name, event.event_id, exc)
                failures[name] = exc
            else:
                accepted.append(name)

        if not accepted:
            raise SinkDispatchError(event.event_id, failures)
        if failures:
            logger.warning(
                "Event %s delivered to %s; failed at %s.",
                event.event_id,
                ", ".join(accepted),
                ", ".join(failures),
            )
        return accepted
