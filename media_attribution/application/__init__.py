"""Application layer package."""

from .dashboard_service import (
    UploadOutcome,
    active_dataset,
    clear_state,
    comparison_rows,
    delete_dataset,
    persist,
    rename_dataset,
    select_campaign,
    select_datasets_for_comparison,
    selected_datasets,
    set_active_dataset,
    toggle_comparison_mode,
    upload_dataset,
    upload_file,
)
from .export_service import build_export_sheets, build_summary, export_report

__all__ = [
    "UploadOutcome",
    "active_dataset",
    "build_export_sheets",
    "build_summary",
    "clear_state",
    "comparison_rows",
    "delete_dataset",
    "export_report",
    "persist",
    "rename_dataset",
    "select_campaign",
    "select_datasets_for_comparison",
    "selected_datasets",
    "set_active_dataset",
    "toggle_comparison_mode",
    "upload_dataset",
    "upload_file",
]
