"""Application service for the dataset collection: upload, filter, compare."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, List, Sequence

from media_attribution.aggregation import aggregate, calculate_dashboard_stats
from media_attribution.comparison import compare_datasets, rank_comparison_rows
from media_attribution.config import ALL_CAMPAIGNS_ID, TOP_PUBLISHER_LIMIT
from media_attribution.domain.campaigns import campaigns_with_all, filter_by_campaign, is_all_campaigns
from media_attribution.domain.errors import CsvInputError
from media_attribution.domain.models import ComparisonRow, DashboardState, Dataset, RawRecord
from media_attribution.infrastructure.upload_reader import read_upload_text, validate_file_type
from media_attribution.ingestion import parse_csv_text

if TYPE_CHECKING:
    from media_attribution.infrastructure.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

_CSV_SUFFIX = re.compile(r"\.csv$", re.IGNORECASE)


@dataclass(frozen=True)
class UploadOutcome:
    state: DashboardState
    error: str | None = None
    dataset: Dataset | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def default_dataset_name(file_name: str) -> str:
    return _CSV_SUFFIX.sub("", file_name)


def _new_dataset_id(state: DashboardState, now: datetime) -> str:
    base = f"dataset_{int(now.timestamp() * 1000)}"
    taken = {dataset.id for dataset in state.datasets}
    candidate = base
    suffix = 2
    while candidate in taken:
        candidate = f"{base}_{suffix}"
        suffix += 1
    return candidate


def process_dataset(dataset: Dataset, campaign_id: str | None) -> Dataset:
    """Re-filter and re-aggregate a dataset from its raw records."""
    filtered = filter_by_campaign(dataset.raw_records, campaign_id)
    processed = aggregate(filtered, limit=TOP_PUBLISHER_LIMIT)
    return replace(
        dataset,
        selected_campaign=ALL_CAMPAIGNS_ID if is_all_campaigns(campaign_id) else campaign_id,
        processed=tuple(processed),
        stats=calculate_dashboard_stats(processed),
    )


def build_dataset(
    records: Sequence[RawRecord],
    dataset_id: str,
    name: str,
    file_name: str,
    uploaded_at: datetime,
) -> Dataset:
    dataset = Dataset(
        id=dataset_id,
        name=name,
        file_name=file_name,
        uploaded_at=uploaded_at,
        raw_records=tuple(records),
        campaigns=tuple(campaigns_with_all(records)),
    )
    return process_dataset(dataset, ALL_CAMPAIGNS_ID)


def find_dataset(state: DashboardState, dataset_id: str | None) -> Dataset | None:
    if dataset_id is None:
        return None
    return next((dataset for dataset in state.datasets if dataset.id == dataset_id), None)


def active_dataset(state: DashboardState) -> Dataset | None:
    return find_dataset(state, state.active_dataset_id)


def selected_datasets(state: DashboardState) -> List[Dataset]:
    by_id = {dataset.id: dataset for dataset in state.datasets}
    return [by_id[dataset_id] for dataset_id in state.selected_dataset_ids if dataset_id in by_id]


def upload_dataset(
    state: DashboardState,
    text: str,
    file_name: str,
    name: str | None = None,
    now: datetime | None = None,
    dataset_id: str | None = None,
) -> UploadOutcome:
    """Parse and aggregate an upload; a failed upload hands back the original state untouched."""
    result = parse_csv_text(text)
    if result.error is not None:
        return UploadOutcome(state=state, error=str(result.error))

    uploaded_at = now or datetime.now()
    dataset = build_dataset(
        result.records,
        dataset_id=dataset_id or _new_dataset_id(state, uploaded_at),
        name=(name or "").strip() or default_dataset_name(file_name),
        file_name=file_name,
        uploaded_at=uploaded_at,
    )
    logger.info(
        "Loaded dataset %s (%s): %d rows, %d campaigns, %d publishers",
        dataset.id,
        dataset.name,
        len(dataset.raw_records),
        len(dataset.campaigns) - 1,
        len(dataset.processed),
    )
    new_state = replace(state, datasets=(*state.datasets, dataset), active_dataset_id=dataset.id)
    return UploadOutcome(state=new_state, dataset=dataset)


def upload_file(
    state: DashboardState,
    path: str | Path,
    name: str | None = None,
    mime_type: str | None = None,
    now: datetime | None = None,
) -> UploadOutcome:
    file_path = Path(path)
    if not validate_file_type(file_path.name, mime_type):
        return UploadOutcome(state=state, error="Please upload a CSV file")
    try:
        text = read_upload_text(file_path)
    except CsvInputError as exc:
        return UploadOutcome(state=state, error=str(exc))
    return upload_dataset(state, text, file_name=file_path.name, name=name, now=now)


def _replace_dataset(state: DashboardState, updated: Dataset) -> DashboardState:
    datasets = tuple(updated if dataset.id == updated.id else dataset for dataset in state.datasets)
    return replace(state, datasets=datasets)


def select_campaign(state: DashboardState, dataset_id: str, campaign_id: str | None) -> DashboardState:
    dataset = find_dataset(state, dataset_id)
    if dataset is None:
        logger.warning("No dataset %s loaded, cannot filter by campaign", dataset_id)
        return state
    updated = process_dataset(dataset, campaign_id)
    logger.info("Filtered %s by campaign %s: %d publishers", dataset_id, updated.selected_campaign, len(updated.processed))
    return _replace_dataset(state, updated)


def rename_dataset(state: DashboardState, dataset_id: str, name: str) -> DashboardState:
    dataset = find_dataset(state, dataset_id)
    new_name = name.strip()
    if dataset is None or not new_name:
        return state
    return _replace_dataset(state, replace(dataset, name=new_name))


def delete_dataset(state: DashboardState, dataset_id: str) -> DashboardState:
    if find_dataset(state, dataset_id) is None:
        return state
    remaining = tuple(dataset for dataset in state.datasets if dataset.id != dataset_id)
    active_id = state.active_dataset_id
    if active_id == dataset_id:
        active_id = remaining[0].id if remaining else None
    return replace(
        state,
        datasets=remaining,
        active_dataset_id=active_id,
        selected_dataset_ids=tuple(item for item in state.selected_dataset_ids if item != dataset_id),
    )


def set_active_dataset(state: DashboardState, dataset_id: str) -> DashboardState:
    if find_dataset(state, dataset_id) is None:
        return state
    return replace(state, active_dataset_id=dataset_id)


def select_datasets_for_comparison(state: DashboardState, dataset_ids: Sequence[str]) -> DashboardState:
    known = {dataset.id for dataset in state.datasets}
    selection: list[str] = []
    for dataset_id in dataset_ids:
        if dataset_id in known and dataset_id not in selection:
            selection.append(dataset_id)
    return replace(state, selected_dataset_ids=tuple(selection))


def toggle_comparison_mode(state: DashboardState) -> DashboardState:
    return replace(state, comparison_mode=not state.comparison_mode)


def clear_state() -> DashboardState:
    return DashboardState()


def comparison_rows(state: DashboardState, limit: int | None = TOP_PUBLISHER_LIMIT) -> List[ComparisonRow]:
    return rank_comparison_rows(compare_datasets(selected_datasets(state)), limit=limit)


def persist(store: "SnapshotStore", state: DashboardState) -> bool:
    """Best-effort save; a failing store never breaks the caller."""
    try:
        store.save(state)
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("Failed to persist dashboard state: %s", exc)
        return False
    return True
