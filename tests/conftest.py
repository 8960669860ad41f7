from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence

import pytest

from media_attribution.application.dashboard_service import build_dataset
from media_attribution.domain.models import Dataset, RawRecord

HEADER = (
    "Advertiser,Campaign,Media Type,Publisher Name,Publisher Name (with tail aggregation),"
    "Site,Publisher ID,Bids,Impressions,Advertiser Cost (Adv Currency),CPM"
)


def make_record(
    publisher: str,
    impressions: int,
    cost: float,
    campaign: str = "Campaign A",
    tail: str | None = None,
) -> RawRecord:
    return RawRecord(
        advertiser="Lawrence",
        campaign=campaign,
        media_type="Video",
        publisher_name=publisher,
        tail_publisher_name=tail,
        site="site",
        impressions=impressions,
        cost=cost,
    )


def make_dataset(
    dataset_id: str,
    records: Sequence[RawRecord],
    name: str | None = None,
) -> Dataset:
    return build_dataset(
        records,
        dataset_id=dataset_id,
        name=name or dataset_id,
        file_name=f"{dataset_id}.csv",
        uploaded_at=datetime(2024, 1, 15, 9, 30),
    )


def csv_text(lines: Iterable[str], header: str = HEADER) -> str:
    return "\n".join([header, *lines]) + "\n"


@pytest.fixture
def example_records() -> list[RawRecord]:
    return [
        make_record("Hulu", 10000, 500.00),
        make_record("Hulu", 15000, 750.00),
        make_record("Disney+", 20000, 1000.00),
    ]


@pytest.fixture
def sample_csv_text() -> str:
    return csv_text(
        [
            'Lawrence,Campaign A,Video,Hulu,,com.hulu.plus,r1,"88,877","10,000",500.00,50',
            "Lawrence,Campaign A,Video,Hulu,,2285,r2,120,\"15,000\",750.00,50",
            'Lawrence,Campaign B,Video,Disney+,,291097,r3,300,"20,000","1,000.00",50',
        ]
    )


@pytest.fixture
def second_csv_text() -> str:
    return csv_text(
        [
            'Lawrence,Campaign A,Video,Hulu,,com.hulu.plus,r1,10,"30,000","1,500.00",50',
            "Lawrence,Campaign B,Video,Pluto,,p1,r4,10,8000,200.00,25",
        ]
    )
