"""Infrastructure adapter for summary export targets."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

from ledger.reporting import write_html_report


def _json_safe(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return value


def save_summary_json(path: Path, summary: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(_json_safe(summary), indent=2, ensure_ascii=False, allow_nan=False)
    path.write_text(text, encoding="utf-8")


def save_summary_html(path: Path, summary: dict[str, Any]) -> None:
    write_html_report(path, summary)
