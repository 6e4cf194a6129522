"""Results writing domain exports."""

from .report_models import ReportContext
from .run_report_writer import (
    format_summary_table,
    render_run_report,
    report_path_for,
    write_run_report,
)

__all__ = [
    "ReportContext",
    "format_summary_table",
    "render_run_report",
    "report_path_for",
    "write_run_report",
]
