"""Tests for event routing — dispatcher fan-out and the built-in sinks."""

from __future__ import annotations

import pytest

from bazaar.core.errors import NoProceeds
from bazaar.models.events import ItemCanceled, ItemListed, MarketEvent
from bazaar.routing import (
    EventDispatcher,
    JournalSink,
    LocalFileSink,
    SinkDispatchError,
)
from bazaar.routing.sinks import BaseSink


def _event() -> ItemListed:
    return ItemListed(seller="0xalice", collection="punks", item_id=1, price=10)


class _RecordingSink:
    def __init__(self, name: str = "recording") -> None:
        self._name = name
        self.received: list[MarketEvent] = []

    @property
    def sink_name(self) -> str:
        return self._name

    def accept(self, event: MarketEvent) -> None:
        self.received.append(event)


class _BrokenSink:
    @property
    def sink_name(self) -> str:
        return "broken"

    def accept(self, event: MarketEvent) -> None:
        raise OSError("disk full")


class TestEventDispatcher:
    def test_no_sinks_routes_nothing(self):
        assert EventDispatcher().dispatch(_event()) == []

    def test_fans_out_to_every_sink(self):
        a, b = _RecordingSink("a"), _RecordingSink("b")
        dispatcher = EventDispatcher()
        dispatcher.register_sink(a)
        dispatcher.register_sink(b)
        event = _event()
        assert dispatcher.dispatch(event) == ["a", "b"]
        assert a.received == [event]
        assert b.received == [event]

    def test_duplicate_registration_ignored(self):
        sink = _RecordingSink()
        dispatcher = EventDispatcher()
        dispatcher.register_sink(sink)
        dispatcher.register_sink(sink)
        assert len(dispatcher.registered_sinks) == 1

    def test_unregister(self):
        sink = _RecordingSink()
        dispatcher = EventDispatcher()
        dispatcher.register_sink(sink)
        dispatcher.unregister_sink(sink)
        assert dispatcher.registered_sinks == []

    def test_partial_failure_tolerated(self):
        good = _RecordingSink("good")
        dispatcher = EventDispatcher()
        dispatcher.register_sink(_BrokenSink())
        dispatcher.register_sink(good)
        assert dispatcher.dispatch(_event()) == ["good"]
        assert len(good.received) == 1

    def test_all_sinks_failing_raises(self):
        dispatcher = EventDispatcher()
        dispatcher.register_sink(_BrokenSink())
        with pytest.raises(SinkDispatchError, match="disk full"):
            dispatcher.dispatch(_event())

    def test_builtin_sinks_satisfy_protocol(self, tmp_dir, journal):
        assert isinstance(LocalFileSink(tmp_dir / "events"), BaseSink)
        assert isinstance(JournalSink(journal), BaseSink)


class TestLocalFileSink:
    def test_writes_one_file_per_event(self, tmp_dir):
        sink = LocalFileSink(tmp_dir / "events")
        event = _event()
        sink.accept(event)
        (path,) = sink.list_events("item_listed")
        assert path.name == f"{event.event_id}.json"
        data = sink.read_event(path)
        assert data["price"] == 10
        assert data["kind"] == "item_listed"

    def test_list_events_by_kind(self, tmp_dir):
        sink = LocalFileSink(tmp_dir / "events")
        sink.accept(_event())
        sink.accept(ItemCanceled(seller="0xalice", collection="punks", item_id=1))
        assert len(sink.list_events()) == 2
        assert len(sink.list_events("item_canceled")) == 1
        assert sink.list_events("item_bought") == []


class TestJournalSink:
    def test_accept_appends_to_journal(self, journal):
        sink = JournalSink(journal)
        entry_hash = sink.accept(_event())
        assert journal.latest().entry_hash == entry_hash
        assert sink.sink_name == "journal"


class TestMarketplaceRouting:
    def test_operations_reach_the_journal(self, journaled_market, assets, journal):
        assets.approve("punks", 1, journaled_market.operator)
        journaled_market.list_item("punks", 1, 100, caller="0xalice")
        journaled_market.buy_item("punks", 1, caller="0xbob", paid_value=100)
        journaled_market.withdraw_proceeds(caller="0xalice")
        kinds = [entry.event_kind for entry in journal.entries()]
        assert kinds == ["item_listed", "item_bought", "proceeds_withdrawn"]
        assert journal.verify_chain() is True

    def test_failed_operation_emits_nothing(self, journaled_market, journal):
        with pytest.raises(NoProceeds):
            journaled_market.withdraw_proceeds(caller="0xalice")
        assert len(journal) == 0

    def test_sink_failure_does_not_undo_the_operation(self, assets, funds):
        from bazaar.marketplace import Marketplace

        dispatcher = EventDispatcher()
        dispatcher.register_sink(_BrokenSink())
        market = Marketplace(assets, funds, dispatcher=dispatcher)
        assets.approve("punks", 1, market.operator)
        market.list_item("punks", 1, 100, caller="0xalice")
        assert market.is_listed("punks", 1)
        assert len(market.events) == 1
