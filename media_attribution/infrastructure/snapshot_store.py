"""Infrastructure adapters persisting the dataset collection between sessions."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from media_attribution.domain.models import (
    AggregatedPublisherRecord,
    Campaign,
    DashboardState,
    DashboardStats,
    Dataset,
    RawRecord,
)

logger = logging.getLogger(__name__)

SNAPSHOT_SCHEMA_VERSION = 1


class SnapshotStore(Protocol):
    def save(self, state: DashboardState) -> None: ...

    def load(self) -> DashboardState | None: ...


def _dataset_to_payload(dataset: Dataset) -> dict[str, Any]:
    return {
        "id": dataset.id,
        "name": dataset.name,
        "file_name": dataset.file_name,
        "uploaded_at": dataset.uploaded_at.isoformat(),
        "selected_campaign": dataset.selected_campaign,
        "raw_records": [record.to_row() for record in dataset.raw_records],
        "processed": [asdict(record) for record in dataset.processed],
        "campaigns": [asdict(campaign) for campaign in dataset.campaigns],
        "stats": asdict(dataset.stats),
    }


def _dataset_from_payload(payload: dict[str, Any]) -> Dataset:
    return Dataset(
        id=str(payload["id"]),
        name=str(payload["name"]),
        file_name=str(payload["file_name"]),
        uploaded_at=datetime.fromisoformat(payload["uploaded_at"]),
        raw_records=tuple(RawRecord.from_row(row) for row in payload["raw_records"]),
        selected_campaign=payload.get("selected_campaign"),
        processed=tuple(AggregatedPublisherRecord(**row) for row in payload["processed"]),
        campaigns=tuple(Campaign(**row) for row in payload["campaigns"]),
        stats=DashboardStats(**payload["stats"]),
    )


def state_to_payload(state: DashboardState) -> dict[str, Any]:
    return {
        "schema_version": SNAPSHOT_SCHEMA_VERSION,
        "state": {
            "datasets": [_dataset_to_payload(dataset) for dataset in state.datasets],
            "active_dataset_id": state.active_dataset_id,
            "selected_dataset_ids": list(state.selected_dataset_ids),
            "comparison_mode": state.comparison_mode,
        },
    }


def state_from_payload(payload: Any) -> DashboardState | None:
    if not isinstance(payload, dict) or payload.get("schema_version") != SNAPSHOT_SCHEMA_VERSION:
        return None
    state = payload.get("state")
    if not isinstance(state, dict):
        return None
    return DashboardState(
        datasets=tuple(_dataset_from_payload(item) for item in state.get("datasets", [])),
        active_dataset_id=state.get("active_dataset_id"),
        selected_dataset_ids=tuple(str(item) for item in state.get("selected_dataset_ids", [])),
        comparison_mode=bool(state.get("comparison_mode", False)),
    )


class JsonSnapshotStore:
    """Keeps the latest snapshot in one JSON document; last write wins."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def save(self, state: DashboardState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(state_to_payload(state), ensure_ascii=False), encoding="utf-8")

    def load(self) -> DashboardState | None:
        if not self.path.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            return state_from_payload(payload)
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable snapshot %s: %s", self.path, exc)
            return None


class InMemorySnapshotStore:
    def __init__(self, state: DashboardState | None = None) -> None:
        self._state = state

    def save(self, state: DashboardState) -> None:
        self._state = state

    def load(self) -> DashboardState | None:
        return self._state
