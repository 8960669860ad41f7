"""Application service turning dashboard snapshots into export sheets and summaries."""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Sequence

import polars as pl

from media_attribution.aggregation import validate_processed
from media_attribution.application.dashboard_service import active_dataset, comparison_rows, find_dataset
from media_attribution.comparison import comparison_change
from media_attribution.domain.models import AggregatedPublisherRecord, ComparisonRow, DashboardState, Dataset
from media_attribution.infrastructure.excel_exporter import save_output_workbook
from media_attribution.infrastructure.report_exporter import save_summary_html, save_summary_json


def publisher_sheet_df(records: Sequence[AggregatedPublisherRecord]) -> pl.DataFrame:
    return pl.DataFrame(
        {
            "Rank": [record.rank for record in records],
            "Publisher": [record.publisher for record in records],
            "Impressions": [record.impressions for record in records],
            "Spend": [record.spend for record in records],
            "CPM": [record.cpm for record in records],
            "Spend %": [record.spend_percentage for record in records],
        },
        schema={
            "Rank": pl.Int64,
            "Publisher": pl.Utf8,
            "Impressions": pl.Int64,
            "Spend": pl.Float64,
            "CPM": pl.Float64,
            "Spend %": pl.Float64,
        },
    )


def stats_sheet_df(dataset: Dataset) -> pl.DataFrame:
    return pl.DataFrame(
        {
            "Dataset": [dataset.name],
            "File": [dataset.file_name],
            "Campaign": [dataset.selected_campaign or ""],
            "Total Impressions": [dataset.stats.total_impressions],
            "Total Spend": [dataset.stats.total_spend],
            "Average CPM": [dataset.stats.average_cpm],
        }
    )


def comparison_sheet_df(rows: Sequence[ComparisonRow]) -> pl.DataFrame:
    columns: Dict[str, List[Any]] = {"Publisher": [row.publisher for row in rows]}
    if not rows:
        return pl.DataFrame(columns, schema={"Publisher": pl.Utf8})

    names = [slot.dataset_name for slot in rows[0].datasets]
    for idx, slot in enumerate(rows[0].datasets):
        label = slot.dataset_name if names.count(slot.dataset_name) == 1 else f"{slot.dataset_name} ({slot.dataset_id})"
        columns[f"{label} Impressions"] = [row.datasets[idx].impressions for row in rows]
        columns[f"{label} Spend"] = [row.datasets[idx].spend for row in rows]
        columns[f"{label} CPM"] = [row.datasets[idx].cpm for row in rows]
        columns[f"{label} Spend %"] = [row.datasets[idx].spend_percentage for row in rows]
    if len(rows[0].datasets) == 2:
        for metric, label in (("impressions", "Impressions"), ("spend", "Spend"), ("cpm", "CPM")):
            columns[f"{label} Change %"] = [comparison_change(row, metric) for row in rows]
    return pl.DataFrame(columns)


def build_export_sheets(state: DashboardState, dataset_id: str | None = None) -> Dict[str, pl.DataFrame]:
    dataset = find_dataset(state, dataset_id) if dataset_id else active_dataset(state)
    sheets: Dict[str, pl.DataFrame] = {}
    if dataset is not None:
        sheets["publishers"] = publisher_sheet_df(dataset.processed)
        sheets["stats"] = stats_sheet_df(dataset)
    rows = comparison_rows(state)
    if rows:
        sheets["comparison"] = comparison_sheet_df(rows)
    return sheets


def build_summary(state: DashboardState, dataset_id: str | None = None) -> Dict[str, Any]:
    dataset = find_dataset(state, dataset_id) if dataset_id else active_dataset(state)
    summary: Dict[str, Any] = {"datasets": [item.id for item in state.datasets]}
    if dataset is not None:
        summary.update(
            {
                "dataset_id": dataset.id,
                "dataset_name": dataset.name,
                "selected_campaign": dataset.selected_campaign,
                "campaigns": [asdict(campaign) for campaign in dataset.campaigns],
                "stats": asdict(dataset.stats),
                "publishers": [asdict(record) for record in dataset.processed],
                "warnings": validate_processed(dataset.processed),
            }
        )
    summary["comparison"] = [
        {
            "publisher": row.publisher,
            "datasets": [asdict(slot) for slot in row.datasets],
            "spend_change_pct": comparison_change(row, "spend"),
        }
        for row in comparison_rows(state)
    ]
    return summary


def export_report(state: DashboardState, output_path: Path, dataset_id: str | None = None) -> tuple[bool, str]:
    """Write an export chosen by suffix: ``.xlsx``, ``.json`` or ``.html``."""
    suffix = output_path.suffix.lower()
    if suffix == ".xlsx":
        sheets = build_export_sheets(state, dataset_id)
        if not sheets:
            return False, "Nothing to export: no dataset is loaded."
        return save_output_workbook(output_path, sheets)
    if suffix == ".json":
        save_summary_json(output_path, build_summary(state, dataset_id))
        return True, ""
    if suffix in {".html", ".htm"}:
        dataset = find_dataset(state, dataset_id) if dataset_id else active_dataset(state)
        save_summary_html(output_path, dataset, comparison_rows(state))
        return True, ""
    return False, f"Unsupported export format: {output_path.suffix or '(none)'}"
