"""Sorting and rank assignment for aggregated publisher tables."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Sequence

from media_attribution.domain.models import AggregatedPublisherRecord

SORT_FIELDS: Dict[str, Callable[[AggregatedPublisherRecord], Any]] = {
    "rank": lambda record: record.rank,
    "publisher": lambda record: record.publisher.lower(),
    "impressions": lambda record: record.impressions,
    "spend": lambda record: record.spend,
    "cpm": lambda record: record.cpm,
    "spendPercentage": lambda record: record.spend_percentage,
    "spend_percentage": lambda record: record.spend_percentage,
}
SORT_DIRECTIONS: tuple[str, ...] = ("asc", "desc")


def sort_publishers(
    records: Sequence[AggregatedPublisherRecord],
    field: str,
    direction: str = "desc",
) -> List[AggregatedPublisherRecord]:
    """Return a reordered copy; an unknown field leaves the order as it was."""
    key = SORT_FIELDS.get(field)
    if key is None:
        return list(records)
    return sorted(records, key=key, reverse=direction != "asc")


def assign_ranks(records: Sequence[AggregatedPublisherRecord]) -> List[AggregatedPublisherRecord]:
    return [record.with_rank(idx) for idx, record in enumerate(records, start=1)]
