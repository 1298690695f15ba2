"""Deterministic serialization and digests for journal entries and event files."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable, Mapping
from typing import Any


def canonical_json_bytes(obj: Any) -> bytes:
    """Serialize *obj* so equal values always yield identical bytes.

    Keys are sorted, separators carry no whitespace and output is ASCII,
    so integers of any width and non-ASCII identities hash the same on
    every platform.
    """
    text = json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True)
    return text.encode("utf-8")


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def seal(fields: Mapping[str, Any], exclude: Iterable[str] = ("entry_hash",)) -> str:
    """Digest a record's fields, leaving out the ones that hold the seal itself."""
    skipped = set(exclude)
    body = {name: value for name, value in fields.items() if name not in skipped}
    return sha256_hex(canonical_json_bytes(body))
