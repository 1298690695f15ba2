"""Notification routing — fan marketplace events out to every sink."""

from bazaar.routing.dispatcher import EventDispatcher, SinkDispatchError
from bazaar.routing.sinks.journal_sink import JournalSink
from bazaar.routing.sinks.local_file import LocalFileSink

__all__ = ["EventDispatcher", "SinkDispatchError", "JournalSink", "LocalFileSink"]
