"""Environment-driven configuration for the reporting pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Mapping

from ledger.domain.models import SeasonFilter, SourceFilter

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_INPUT_PATH = PROJECT_ROOT / "data" / "raw" / "snapshot.json"
DEFAULT_OUTPUT_DIR = PROJECT_ROOT / "output"
DEFAULT_CURRENCY = "LYD"


@dataclass(frozen=True)
class PipelineConfig:
    input_path: Path
    output_dir: Path
    report_start: date
    report_end: date
    product_ids: tuple[str, ...] = ()
    source: SourceFilter = SourceFilter.ALL
    season: SeasonFilter = SeasonFilter.ALL
    currency: str = DEFAULT_CURRENCY


def _parse_date(name: str, raw: str) -> date:
    try:
        return date.fromisoformat(raw.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid {name}: {raw}") from exc


def _parse_choice(name: str, raw: str, choices: type[SourceFilter] | type[SeasonFilter]) -> SourceFilter | SeasonFilter:
    value = raw.strip().upper()
    try:
        return choices(value)
    except ValueError as exc:
        allowed = ", ".join(choice.value for choice in choices)
        raise ValueError(f"{name} must be one of [{allowed}], got {raw}") from exc


def load_config(environ: Mapping[str, str] | None = None, today: date | None = None) -> PipelineConfig:
    env = os.environ if environ is None else environ
    today = today or date.today()

    start_raw = env.get("LEDGER_REPORT_START", "")
    end_raw = env.get("LEDGER_REPORT_END", "")
    report_start = _parse_date("LEDGER_REPORT_START", start_raw) if start_raw else today.replace(day=1)
    report_end = _parse_date("LEDGER_REPORT_END", end_raw) if end_raw else today
    if report_end < report_start:
        raise ValueError(f"LEDGER_REPORT_END ({report_end}) is before LEDGER_REPORT_START ({report_start})")

    product_ids = tuple(item.strip() for item in env.get("LEDGER_PRODUCT_IDS", "").split(",") if item.strip())
    currency = env.get("LEDGER_CURRENCY", DEFAULT_CURRENCY).strip() or DEFAULT_CURRENCY

    return PipelineConfig(
        input_path=Path(env.get("LEDGER_INPUT_PATH", str(DEFAULT_INPUT_PATH))),
        output_dir=Path(env.get("LEDGER_OUTPUT_DIR", str(DEFAULT_OUTPUT_DIR))),
        report_start=report_start,
        report_end=report_end,
        product_ids=product_ids,
        source=_parse_choice("LEDGER_SOURCE", env.get("LEDGER_SOURCE", "ALL"), SourceFilter),
        season=_parse_choice("LEDGER_SEASON", env.get("LEDGER_SEASON", "ALL"), SeasonFilter),
        currency=currency,
    )
