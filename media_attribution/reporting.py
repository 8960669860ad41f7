"""HTML report generator for a dataset's publisher table and dataset comparisons."""

from __future__ import annotations

from datetime import datetime
from html import escape
from pathlib import Path
from typing import List, Sequence

from media_attribution.aggregation import top_publishers, validate_processed
from media_attribution.application.reporting.metrics import (
    fmt_change,
    fmt_count,
    fmt_money,
    fmt_money_compact,
    fmt_share,
)
from media_attribution.comparison import change_direction, comparison_change
from media_attribution.domain.models import ComparisonRow, Dataset

CHANGE_CSS_CLASS = {"up": "chg-up", "down": "chg-down", "flat": "chg-flat"}

_STYLE = """
body { font-family: -apple-system, Segoe UI, Helvetica, Arial, sans-serif; margin: 24px; color: #1f2933; }
h1 { font-size: 22px; margin-bottom: 4px; }
.meta { color: #616e7c; font-size: 13px; margin-bottom: 18px; }
.cards { display: flex; gap: 12px; margin-bottom: 18px; }
.card { border: 1px solid #d9e2ec; border-radius: 8px; padding: 10px 16px; min-width: 160px; }
.card .label { color: #616e7c; font-size: 12px; }
.card .value { font-size: 20px; font-weight: 600; }
table { border-collapse: collapse; width: 100%; margin-bottom: 24px; font-size: 13px; }
th, td { border-bottom: 1px solid #e4e7eb; padding: 6px 8px; text-align: right; }
th:first-child, td:first-child, th.pub, td.pub { text-align: left; }
.chg-up { color: #2f8132; }
.chg-down { color: #c62828; }
.chg-flat { color: #9aa5b1; }
.warnings { color: #b7791f; font-size: 12px; }
"""


def _render_stat_cards(dataset: Dataset) -> str:
    stats = dataset.stats
    cards = [
        ("Total Impressions", fmt_count(stats.total_impressions)),
        ("Total Spend", fmt_money_compact(stats.total_spend)),
        ("Average CPM", fmt_money(stats.average_cpm)),
    ]
    inner = "".join(
        f'<div class="card"><div class="label">{escape(label)}</div><div class="value">{escape(value)}</div></div>'
        for label, value in cards
    )
    return f'<div class="cards">{inner}</div>'


def _render_publisher_rows(dataset: Dataset) -> str:
    rows: List[str] = []
    for record in dataset.processed:
        rows.append(
            "<tr>"
            f"<td>{record.rank}</td>"
            f'<td class="pub">{escape(record.publisher)}</td>'
            f"<td>{fmt_count(record.impressions)}</td>"
            f"<td>{fmt_money(record.spend)}</td>"
            f"<td>{fmt_money(record.cpm)}</td>"
            f"<td>{fmt_share(record.spend_percentage)}</td>"
            "</tr>"
        )
    return "".join(rows)


def _render_dataset_section(dataset: Dataset) -> str:
    campaign = dataset.selected_campaign or "all"
    campaign_label = next((item.name for item in dataset.campaigns if item.id == campaign), campaign)
    top_names = ", ".join(escape(record.publisher) for record in top_publishers(dataset.processed))
    warnings = validate_processed(dataset.processed)
    warning_html = ""
    if warnings:
        warning_html = '<div class="warnings">' + "<br>".join(escape(item) for item in warnings) + "</div>"
    return (
        f"<h1>{escape(dataset.name)}</h1>"
        f'<div class="meta">{escape(dataset.file_name)} · uploaded {dataset.uploaded_at:%Y-%m-%d %H:%M} · '
        f"campaign: {escape(campaign_label)}</div>"
        f"{_render_stat_cards(dataset)}"
        f'<div class="meta">Top publishers: {top_names or "-"}</div>'
        "<table><thead><tr><th>Rank</th><th class=\"pub\">Publisher</th><th>Impressions</th>"
        "<th>Spend</th><th>CPM</th><th>Share</th></tr></thead>"
        f"<tbody>{_render_publisher_rows(dataset)}</tbody></table>"
        f"{warning_html}"
    )


def _render_change_cell(row: ComparisonRow, metric: str) -> str:
    change = comparison_change(row, metric)
    css_class = CHANGE_CSS_CLASS[change_direction(change)]
    return f'<td class="{css_class}">{escape(fmt_change(change))}</td>'


def _render_comparison_section(rows: Sequence[ComparisonRow]) -> str:
    if not rows:
        return ""
    slots = rows[0].datasets
    pairwise = len(slots) == 2
    head = ['<th class="pub">Publisher</th>']
    for slot in slots:
        name = escape(slot.dataset_name)
        head.append(f"<th>{name} Impressions</th><th>{name} Spend</th><th>{name} CPM</th>")
    if pairwise:
        head.append("<th>Impressions Chg</th><th>Spend Chg</th><th>CPM Chg</th>")

    body: List[str] = []
    for row in rows:
        cells = [f'<td class="pub">{escape(row.publisher)}</td>']
        for slot in row.datasets:
            cells.append(
                f"<td>{fmt_count(slot.impressions)}</td><td>{fmt_money(slot.spend)}</td><td>{fmt_money(slot.cpm)}</td>"
            )
        if pairwise:
            cells.extend(_render_change_cell(row, metric) for metric in ("impressions", "spend", "cpm"))
        body.append("<tr>" + "".join(cells) + "</tr>")

    return (
        "<h1>Dataset comparison</h1>"
        f"<table><thead><tr>{''.join(head)}</tr></thead><tbody>{''.join(body)}</tbody></table>"
    )


def render_html_report(dataset: Dataset | None, comparison: Sequence[ComparisonRow]) -> str:
    sections: List[str] = []
    if dataset is not None:
        sections.append(_render_dataset_section(dataset))
    sections.append(_render_comparison_section(comparison))
    if not any(sections):
        sections.append("<p>No datasets uploaded.</p>")
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"><title>Publisher Performance</title>"
        f"<style>{_STYLE}</style></head><body>"
        f"{''.join(sections)}"
        f'<div class="meta">Generated {datetime.now():%Y-%m-%d %H:%M}</div>'
        "</body></html>"
    )


def write_html_report(output_path: Path, dataset: Dataset | None, comparison: Sequence[ComparisonRow]) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_html_report(dataset, comparison), encoding="utf-8")
