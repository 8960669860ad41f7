"""Plain-text rendering of publisher tables, stats and comparisons."""

from __future__ import annotations

from typing import List, Sequence

from media_attribution.application.reporting.metrics import fmt_change, fmt_count, fmt_money, fmt_share
from media_attribution.comparison import comparison_change
from media_attribution.domain.models import (
    AggregatedPublisherRecord,
    Campaign,
    ComparisonRow,
    DashboardState,
    DashboardStats,
)


def _table(headers: Sequence[str], rows: Sequence[Sequence[str]], numeric_from: int = 1) -> str:
    widths = [len(header) for header in headers]
    for row in rows:
        for idx, cell in enumerate(row):
            widths[idx] = max(widths[idx], len(cell))

    def _line(cells: Sequence[str]) -> str:
        parts = [
            cell.rjust(widths[idx]) if idx >= numeric_from else cell.ljust(widths[idx])
            for idx, cell in enumerate(cells)
        ]
        return "  ".join(parts).rstrip()

    lines = [_line(headers), "  ".join("-" * width for width in widths)]
    lines.extend(_line(row) for row in rows)
    return "\n".join(lines)


def render_stats(stats: DashboardStats) -> str:
    return (
        f"Total Impressions: {fmt_count(stats.total_impressions)} | "
        f"Total Spend: {fmt_money(stats.total_spend)} | "
        f"Average CPM: {fmt_money(stats.average_cpm)}"
    )


def render_publisher_table(records: Sequence[AggregatedPublisherRecord]) -> str:
    if not records:
        return "No publisher data for the current selection."
    rows = [
        [
            str(record.rank),
            record.publisher,
            fmt_count(record.impressions),
            fmt_money(record.spend),
            fmt_money(record.cpm),
            fmt_share(record.spend_percentage),
        ]
        for record in records
    ]
    headers = ["Rank", "Publisher", "Impressions", "Spend", "CPM", "Share"]
    return _table(headers, rows, numeric_from=2)


def render_campaigns(campaigns: Sequence[Campaign], selected: str | None) -> str:
    lines: List[str] = []
    for campaign in campaigns:
        marker = "*" if campaign.id == selected else " "
        lines.append(f"{marker} {campaign.name}")
    return "\n".join(lines)


def render_dataset_list(state: DashboardState) -> str:
    if not state.datasets:
        return "No datasets uploaded. Upload a CSV to get started."
    rows = []
    for dataset in state.datasets:
        flags = ""
        if dataset.id == state.active_dataset_id:
            flags += "active"
        if dataset.id in state.selected_dataset_ids:
            flags += ",compare" if flags else "compare"
        rows.append(
            [
                dataset.id,
                dataset.name,
                dataset.file_name,
                dataset.uploaded_at.strftime("%Y-%m-%d %H:%M"),
                fmt_count(len(dataset.raw_records)),
                flags,
            ]
        )
    return _table(["ID", "Name", "File", "Uploaded", "Rows", "Flags"], rows, numeric_from=4)


def render_comparison_table(rows: Sequence[ComparisonRow]) -> str:
    if not rows:
        return "Select at least 2 datasets to compare."

    dataset_names = [slot.dataset_name for slot in rows[0].datasets]
    pairwise = len(dataset_names) == 2
    headers = ["Publisher"]
    for name in dataset_names:
        headers.extend([f"{name} Impr.", f"{name} Spend", f"{name} CPM"])
    if pairwise:
        headers.extend(["Impr. Chg", "Spend Chg", "CPM Chg"])

    table_rows: List[List[str]] = []
    for row in rows:
        cells = [row.publisher]
        for slot in row.datasets:
            cells.extend([fmt_count(slot.impressions), fmt_money(slot.spend), fmt_money(slot.cpm)])
        if pairwise:
            cells.extend(fmt_change(comparison_change(row, metric)) for metric in ("impressions", "spend", "cpm"))
        table_rows.append(cells)
    return _table(headers, table_rows)
