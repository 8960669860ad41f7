"""Domain models for publisher attribution datasets."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Mapping

from media_attribution.config import (
    ADVERTISER_COLUMN,
    ALL_CAMPAIGNS_ID,
    ALL_CAMPAIGNS_NAME,
    CAMPAIGN_COLUMN,
    COST_COLUMN,
    IMPRESSIONS_COLUMN,
    MEDIA_TYPE_COLUMN,
    PUBLISHER_NAME_COLUMN,
    SITE_COLUMN,
    TAIL_PUBLISHER_COLUMN,
)

KNOWN_COLUMNS: frozenset[str] = frozenset(
    {
        ADVERTISER_COLUMN,
        CAMPAIGN_COLUMN,
        MEDIA_TYPE_COLUMN,
        PUBLISHER_NAME_COLUMN,
        TAIL_PUBLISHER_COLUMN,
        SITE_COLUMN,
        IMPRESSIONS_COLUMN,
        COST_COLUMN,
    }
)


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _to_finite_float(value: Any) -> float:
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


@dataclass(frozen=True)
class RawRecord:
    """One parsed input row; numeric cells are already converted."""

    advertiser: str
    campaign: str
    media_type: str
    publisher_name: str
    tail_publisher_name: str | None
    site: str
    impressions: int
    cost: float
    extras: tuple[tuple[str, str], ...] = ()

    @property
    def publisher_key(self) -> str:
        return self.tail_publisher_name or self.publisher_name

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "RawRecord":
        tail = row.get(TAIL_PUBLISHER_COLUMN)
        extras = tuple(
            (str(name), _to_text(value)) for name, value in row.items() if name not in KNOWN_COLUMNS
        )
        return cls(
            advertiser=_to_text(row.get(ADVERTISER_COLUMN)),
            campaign=_to_text(row.get(CAMPAIGN_COLUMN)),
            media_type=_to_text(row.get(MEDIA_TYPE_COLUMN)),
            publisher_name=_to_text(row.get(PUBLISHER_NAME_COLUMN)),
            tail_publisher_name=None if tail is None else str(tail),
            site=_to_text(row.get(SITE_COLUMN)),
            impressions=int(_to_finite_float(row.get(IMPRESSIONS_COLUMN))),
            cost=_to_finite_float(row.get(COST_COLUMN)),
            extras=extras,
        )

    def to_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {
            ADVERTISER_COLUMN: self.advertiser,
            CAMPAIGN_COLUMN: self.campaign,
            MEDIA_TYPE_COLUMN: self.media_type,
            PUBLISHER_NAME_COLUMN: self.publisher_name,
            SITE_COLUMN: self.site,
            IMPRESSIONS_COLUMN: self.impressions,
            COST_COLUMN: self.cost,
        }
        if self.tail_publisher_name is not None:
            row[TAIL_PUBLISHER_COLUMN] = self.tail_publisher_name
        row.update(dict(self.extras))
        return row


@dataclass(frozen=True)
class AggregatedPublisherRecord:
    rank: int
    publisher: str
    impressions: int
    spend: float
    cpm: float
    spend_percentage: float

    def with_rank(self, rank: int) -> "AggregatedPublisherRecord":
        return replace(self, rank=rank)


@dataclass(frozen=True)
class Campaign:
    id: str
    name: str

    @classmethod
    def all_campaigns(cls) -> "Campaign":
        return cls(id=ALL_CAMPAIGNS_ID, name=ALL_CAMPAIGNS_NAME)


@dataclass(frozen=True)
class DashboardStats:
    total_impressions: int = 0
    total_spend: float = 0.0
    average_cpm: float = 0.0


@dataclass(frozen=True)
class DatasetMetrics:
    """Metrics of one publisher inside one dataset's slot of a comparison row."""

    dataset_id: str
    dataset_name: str
    impressions: int = 0
    spend: float = 0.0
    cpm: float = 0.0
    spend_percentage: float = 0.0


@dataclass(frozen=True)
class ComparisonRow:
    publisher: str
    datasets: tuple[DatasetMetrics, ...]

    @property
    def total_spend(self) -> float:
        return sum(slot.spend for slot in self.datasets)


@dataclass(frozen=True)
class Dataset:
    id: str
    name: str
    file_name: str
    uploaded_at: datetime
    raw_records: tuple[RawRecord, ...]
    selected_campaign: str | None = ALL_CAMPAIGNS_ID
    processed: tuple[AggregatedPublisherRecord, ...] = ()
    campaigns: tuple[Campaign, ...] = field(default_factory=lambda: (Campaign.all_campaigns(),))
    stats: DashboardStats = field(default_factory=DashboardStats)


@dataclass(frozen=True)
class DashboardState:
    """Snapshot of the dataset collection; every change produces a new snapshot."""

    datasets: tuple[Dataset, ...] = ()
    active_dataset_id: str | None = None
    selected_dataset_ids: tuple[str, ...] = ()
    comparison_mode: bool = False
