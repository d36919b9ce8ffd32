"""Report workbook output: one sheet per polars frame, xlsxwriter first, openpyxl fallback."""

from __future__ import annotations

import math
from datetime import date
from pathlib import Path
from typing import Any, Mapping

import polars as pl

SHEET_NAME_LIMIT = 31
MAX_COLUMN_WIDTH = 48


def _sheet_title(name: str) -> str:
    return str(name)[:SHEET_NAME_LIMIT]


def _cell(value: Any) -> Any:
    # Excel has no representation for NaN or infinity.
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _column_width(frame: pl.DataFrame, column: str) -> int:
    longest = len(column)
    for value in frame.get_column(column).to_list():
        text = value.isoformat() if isinstance(value, date) else str(value)
        longest = max(longest, len(text))
    return min(longest + 2, MAX_COLUMN_WIDTH)


def _write_with_xlsxwriter(path: Path, sheets: Mapping[str, pl.DataFrame]) -> bool:
    try:
        import xlsxwriter
    except ImportError:
        return False

    try:
        with xlsxwriter.Workbook(str(path)) as workbook:
            for name, frame in sheets.items():
                frame.write_excel(workbook=workbook, worksheet=_sheet_title(name), autofit=True)
    except Exception:
        return False
    return True


def _write_with_openpyxl(path: Path, sheets: Mapping[str, pl.DataFrame]) -> None:
    from openpyxl import Workbook
    from openpyxl.utils import get_column_letter

    workbook = Workbook()
    workbook.remove(workbook.active)
    for name, frame in sheets.items():
        worksheet = workbook.create_sheet(title=_sheet_title(name))
        worksheet.append(list(frame.columns))
        for row in frame.iter_rows():
            worksheet.append([_cell(value) for value in row])
        worksheet.freeze_panes = "A2"
        for index, column in enumerate(frame.columns, start=1):
            worksheet.column_dimensions[get_column_letter(index)].width = _column_width(frame, column)
    workbook.save(path)


def write_report_workbook(path: Path, sheets: Mapping[str, pl.DataFrame]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if sheets and _write_with_xlsxwriter(path, sheets):
        return
    _write_with_openpyxl(path, sheets)


def save_output_workbook(path: Path, sheets: dict[str, pl.DataFrame]) -> tuple[bool, str]:
    try:
        write_report_workbook(path, sheets)
    except PermissionError as exc:
        return False, str(exc)
    return True, ""
