"""Comparison Engine: per-publisher metric matrix across datasets."""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from media_attribution.config import TOP_PUBLISHER_LIMIT
from media_attribution.domain.models import AggregatedPublisherRecord, ComparisonRow, Dataset, DatasetMetrics

logger = logging.getLogger(__name__)

CHANGE_EPSILON = 0.1
CHANGE_METRICS: tuple[str, ...] = ("impressions", "spend", "cpm", "spendPercentage")
_METRIC_ATTRS: Dict[str, str] = {
    "impressions": "impressions",
    "spend": "spend",
    "cpm": "cpm",
    "spendPercentage": "spend_percentage",
    "spend_percentage": "spend_percentage",
}


class ComparisonEngine:
    """Reconciles independently aggregated datasets into one row per publisher."""

    MIN_DATASETS = 2

    @staticmethod
    def _publisher_map(dataset: Dataset) -> Dict[str, AggregatedPublisherRecord]:
        mapping: Dict[str, AggregatedPublisherRecord] = {}
        for record in dataset.processed:
            mapping.setdefault(record.publisher, record)
        return mapping

    @staticmethod
    def _slot(dataset: Dataset, record: AggregatedPublisherRecord | None) -> DatasetMetrics:
        if record is None:
            return DatasetMetrics(dataset_id=dataset.id, dataset_name=dataset.name)
        return DatasetMetrics(
            dataset_id=dataset.id,
            dataset_name=dataset.name,
            impressions=record.impressions,
            spend=record.spend,
            cpm=record.cpm,
            spend_percentage=record.spend_percentage,
        )

    def run(self, datasets: Sequence[Dataset]) -> List[ComparisonRow]:
        if len(datasets) < self.MIN_DATASETS:
            logger.debug("Comparison needs at least %d datasets, got %d", self.MIN_DATASETS, len(datasets))
            return []

        maps = [(dataset, self._publisher_map(dataset)) for dataset in datasets]
        publishers = sorted({name for _, mapping in maps for name in mapping})
        return [
            ComparisonRow(
                publisher=publisher,
                datasets=tuple(self._slot(dataset, mapping.get(publisher)) for dataset, mapping in maps),
            )
            for publisher in publishers
        ]


def compare_datasets(datasets: Sequence[Dataset]) -> List[ComparisonRow]:
    return ComparisonEngine().run(datasets)


def rank_comparison_rows(
    rows: Sequence[ComparisonRow],
    limit: int | None = TOP_PUBLISHER_LIMIT,
) -> List[ComparisonRow]:
    """Order rows by spend summed across datasets, highest first, keeping the top ``limit``."""
    ordered = sorted(rows, key=lambda row: row.total_spend, reverse=True)
    if limit is None:
        return ordered
    return ordered[:limit]


def percent_change(first: float, second: float) -> float | None:
    if first == 0:
        return None
    return (second - first) / first * 100


def comparison_change(row: ComparisonRow, metric: str) -> float | None:
    """Percent change from the first to the second dataset; only defined for pairwise comparisons."""
    attr = _METRIC_ATTRS.get(metric)
    if attr is None:
        raise ValueError(f"Unsupported comparison metric: {metric}")
    if len(row.datasets) != 2:
        return None
    first, second = row.datasets
    return percent_change(float(getattr(first, attr)), float(getattr(second, attr)))


def change_direction(change: float | None, eps: float = CHANGE_EPSILON) -> str:
    if change is None or abs(change) < eps:
        return "flat"
    if change > 0:
        return "up"
    return "down"
