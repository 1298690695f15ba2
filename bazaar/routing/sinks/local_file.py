"""Local file sink — writes events to local JSON files.

Layout: {base_path}/{event_kind}/{event_id}.json
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from bazaar.core.hasher import canonical_json_bytes
from bazaar.models.events import MarketEvent

logger = logging.getLogger(__name__)


class LocalFileSink:
    """Writes events to local JSON files.

    Parameters
    ----------
    base_path:
        Root directory for event files.  Defaults to ``.bazaar/events``.
    """

    def __init__(self, base_path: Path | str | None = None) -> None:
        self._base = Path(base_path) if base_path else Path(".bazaar/events")
        self._base.mkdir(parents=True, exist_ok=True)

    @property
    def sink_name(self) -> str:
        return "local_file"

    def accept(self, event: MarketEvent) -> None:
        target_dir = self._base / event.kind.value
        target_dir.mkdir(parents=True, exist_ok=True)

        target_file = target_dir / f"{event.event_id}.json"
        target_file.write_bytes(canonical_json_bytes(event.model_dump(mode="json")))

        logger.debug("LocalFileSink: wrote %s to %s", event.event_id, target_file)

    def list_events(self, kind: str | None = None) -> list[Path]:
        """List event files, optionally filtered by event kind."""
        if kind:
            kind_dir = self._base / kind
            if not kind_dir.exists():
                return []
            return sorted(kind_dir.glob("*.json"))
        return sorted(self._base.rglob("*.json"))

    def read_event(self, path: Path) -> dict:
        """Read and parse a single event file."""
        return json.loads(path.read_bytes())
