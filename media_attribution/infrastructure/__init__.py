"""Infrastructure layer package."""

from .excel_exporter import save_output_workbook, write_output_excel
from .report_exporter import save_summary_html, save_summary_json
from .snapshot_store import InMemorySnapshotStore, JsonSnapshotStore, SnapshotStore
from .upload_reader import format_file_size, read_upload_text, validate_file_type

__all__ = [
    "InMemorySnapshotStore",
    "JsonSnapshotStore",
    "SnapshotStore",
    "format_file_size",
    "read_upload_text",
    "save_output_workbook",
    "save_summary_html",
    "save_summary_json",
    "validate_file_type",
    "write_output_excel",
]
