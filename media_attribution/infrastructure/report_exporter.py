"""Infrastructure adapter for summary export targets."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from media_attribution.domain.models import ComparisonRow, Dataset
from media_attribution.reporting import write_html_report


def save_summary_json(path: Path, summary: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(summary, indent=2, ensure_ascii=False), encoding="utf-8")


def save_summary_html(path: Path, dataset: Dataset | None, comparison: Sequence[ComparisonRow]) -> None:
    write_html_report(path, dataset, comparison)
