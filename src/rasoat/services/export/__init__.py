"""Export services."""

from .workbook import (
    XLSX_MEDIA_TYPE,
    build_records_workbook,
    export_file_name,
    export_records_xlsx,
    format_created_at,
    format_date_dd_mm_yyyy,
)

__all__ = [
    "XLSX_MEDIA_TYPE",
    "build_records_workbook",
    "export_file_name",
    "export_records_xlsx",
    "format_created_at",
    "format_date_dd_mm_yyyy",
]
