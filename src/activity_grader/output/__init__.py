"""Output module: spreadsheet export and printable class reports."""

from .csv_export import export_csv, export_filename, export_order, write_csv
from .pdf_report import (
    ClassReport,
    NoMatchingRecordsError,
    ReportRow,
    build_class_report,
    render_class_report_pdf,
    report_filename,
    thai_long_date,
)

__all__ = [
    "ClassReport",
    "NoMatchingRecordsError",
    "ReportRow",
    "build_class_report",
    "export_csv",
    "export_filename",
    "export_order",
    "render_class_report_pdf",
    "report_filename",
    "thai_long_date",
    "write_csv",
]
