"""Bazaar CLI — Typer-based command-line interface.

Provides the ``bazaar`` command with a scripted demo and read-only views
over persisted listings, proceeds and the event journal.

All output uses Rich for formatted terminal display.
"""
