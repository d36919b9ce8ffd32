"""Infrastructure adapter for the record-store snapshot."""

from __future__ import annotations

from pathlib import Path

from ledger.domain.models import Snapshot
from ledger.ingestion import read_snapshot


def load_snapshot(path: Path) -> Snapshot:
    snapshot = read_snapshot(path)
    known_products = {product.id for product in snapshot.products}
    orphaned = sum(1 for entry in snapshot.entries if entry.product_id not in known_products)
    if orphaned:
        print(f"Snapshot: {orphaned} entries reference unknown products and will be excluded")
    return snapshot
