"""Aggregation Engine: publisher roll-up, CPM and spend share."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Sequence

import polars as pl

from media_attribution.config import CHART_PUBLISHER_LIMIT, MAX_REASONABLE_CPM, TOP_PUBLISHER_LIMIT
from media_attribution.domain.models import AggregatedPublisherRecord, DashboardStats, RawRecord

logger = logging.getLogger(__name__)


def round_half_up(value: float, places: int) -> float:
    """Round to ``places`` decimals with exact halves going away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


class AggregationEngine:
    """Groups raw records by publisher identity and derives per-publisher metrics."""

    KEY_COLUMN = "publisher"
    SCHEMA: Dict[str, Any] = {
        "publisher": pl.Utf8,
        "impressions": pl.Int64,
        "spend": pl.Float64,
    }

    def __init__(self, limit: int | None = TOP_PUBLISHER_LIMIT) -> None:
        if limit is not None and limit <= 0:
            raise ValueError(f"limit must be positive or None, got {limit}")
        self.limit = limit

    @staticmethod
    def _to_float(value: Any, default: float = 0.0) -> float:
        if value is None:
            return default
        return float(value)

    @staticmethod
    def _safe_ratio_expr(num: pl.Expr, den: pl.Expr) -> pl.Expr:
        safe_den = pl.when(den > 0).then(den).otherwise(None)
        return num / safe_den

    def _records_frame(self, records: Sequence[RawRecord]) -> pl.DataFrame:
        return pl.DataFrame(
            {
                "publisher": [record.publisher_key for record in records],
                "impressions": [record.impressions for record in records],
                "spend": [record.cost for record in records],
            },
            schema=self.SCHEMA,
        )

    def group_totals(self, records: Sequence[RawRecord]) -> pl.DataFrame:
        """Summed impressions and spend per publisher, in first-seen order."""
        frame = self._records_frame(records)
        keyed = frame.filter(
            pl.col(self.KEY_COLUMN).is_not_null() & (pl.col(self.KEY_COLUMN).str.strip_chars() != "")
        )
        dropped = frame.height - keyed.height
        if dropped:
            logger.debug("Skipped %d rows without a publisher name", dropped)

        return keyed.group_by(self.KEY_COLUMN, maintain_order=True).agg(
            pl.col("impressions").sum().alias("impressions"),
            pl.col("spend").sum().alias("spend"),
        )

    def _with_derived_metrics(self, grouped: pl.DataFrame) -> pl.DataFrame:
        total_spend = self._to_float(grouped.select(pl.col("spend").sum()).item()) if grouped.height else 0.0
        cpm_expr = (self._safe_ratio_expr(pl.col("spend"), pl.col("impressions").cast(pl.Float64)) * 1000).fill_null(0.0)
        if total_spend > 0:
            share_expr = pl.col("spend") / pl.lit(total_spend) * 100
        else:
            share_expr = pl.lit(0.0)
        return grouped.with_columns(cpm_expr.alias("cpm"), share_expr.alias("spend_percentage"))

    def run(self, records: Sequence[RawRecord]) -> List[AggregatedPublisherRecord]:
        grouped = self.group_totals(records)
        if grouped.is_empty():
            return []

        ordered = self._with_derived_metrics(grouped).sort("spend", descending=True, maintain_order=True)
        if self.limit is not None:
            ordered = ordered.head(self.limit)

        output: List[AggregatedPublisherRecord] = []
        for idx, row in enumerate(ordered.iter_rows(named=True), start=1):
            output.append(
                AggregatedPublisherRecord(
                    rank=idx,
                    publisher=str(row["publisher"]),
                    impressions=int(row["impressions"] or 0),
                    spend=self._to_float(row["spend"]),
                    cpm=round_half_up(self._to_float(row["cpm"]), 2),
                    spend_percentage=round_half_up(self._to_float(row["spend_percentage"]), 1),
                )
            )
        logger.debug("Aggregated %d records into %d publishers", len(records), len(output))
        return output


def aggregate(records: Sequence[RawRecord], limit: int | None = TOP_PUBLISHER_LIMIT) -> List[AggregatedPublisherRecord]:
    """Aggregate records by publisher; ``limit=None`` keeps every publisher."""
    return AggregationEngine(limit=limit).run(records)


def calculate_dashboard_stats(processed: Sequence[AggregatedPublisherRecord]) -> DashboardStats:
    if not processed:
        return DashboardStats()

    total_impressions = sum(record.impressions for record in processed)
    total_spend = sum(record.spend for record in processed)
    average_cpm = total_spend / total_impressions * 1000 if total_impressions > 0 else 0.0
    return DashboardStats(
        total_impressions=total_impressions,
        total_spend=round_half_up(total_spend, 2),
        average_cpm=round_half_up(average_cpm, 2),
    )


def top_publishers(
    processed: Sequence[AggregatedPublisherRecord],
    count: int = CHART_PUBLISHER_LIMIT,
) -> List[AggregatedPublisherRecord]:
    return list(processed[:count])


def validate_processed(processed: Sequence[AggregatedPublisherRecord]) -> List[str]:
    """Sanity warnings for aggregated output; an empty list means nothing looked off."""
    warnings: List[str] = []
    for idx, record in enumerate(processed, start=1):
        if record.impressions < 0:
            warnings.append(f"Row {idx}: {record.publisher} has negative impressions")
        if record.spend < 0:
            warnings.append(f"Row {idx}: {record.publisher} has negative spend")
        if not record.publisher or not record.publisher.strip():
            warnings.append(f"Row {idx}: Missing publisher name")
        if record.cpm < 0 or record.cpm > MAX_REASONABLE_CPM:
            warnings.append(f"Row {idx}: {record.publisher} has unusual CPM: ${record.cpm}")
    return warnings
