"""Snapshot ingestion: record-store JSON export to domain objects."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from ledger.domain.models import DailyEntry, Product, Settings, Snapshot

PRODUCTS_KEY = "products"
ENTRIES_KEY = "dailyEntries"
SETTINGS_KEY = "settings"


def _records(payload: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    value = payload.get(key, [])
    if not isinstance(value, list):
        raise ValueError(f"Snapshot field '{key}' must be a list, got {type(value).__name__}")
    return [item for item in value if isinstance(item, Mapping)]


def snapshot_from_payload(payload: Mapping[str, Any]) -> Snapshot:
    """Build domain objects from the record store's export shape."""
    settings_row = payload.get(SETTINGS_KEY) or {}
    if not isinstance(settings_row, Mapping):
        raise ValueError(f"Snapshot field '{SETTINGS_KEY}' must be an object")
    return Snapshot(
        products=tuple(Product.from_row(row) for row in _records(payload, PRODUCTS_KEY)),
        entries=tuple(DailyEntry.from_row(row) for row in _records(payload, ENTRIES_KEY)),
        settings=Settings.from_row(settings_row),
    )


def read_snapshot(path: str | Path) -> Snapshot:
    snapshot_path = Path(path)
    if not snapshot_path.exists():
        raise FileNotFoundError(f"Input snapshot file not found: {snapshot_path}")
    try:
        payload = json.loads(snapshot_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid snapshot JSON in {snapshot_path}: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise ValueError(f"Snapshot root must be an object: {snapshot_path}")
    return snapshot_from_payload(payload)
