"""Infrastructure layer package."""

from .excel_repository import save_output_workbook
from .report_exporter import save_summary_html, save_summary_json
from .snapshot_repository import load_snapshot

__all__ = ["load_snapshot", "save_output_workbook", "save_summary_json", "save_summary_html"]
