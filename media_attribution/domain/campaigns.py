"""Campaign extraction and the pre-aggregation campaign filter."""

from __future__ import annotations

from typing import Sequence

from media_attribution.config import ALL_CAMPAIGNS_ID
from media_attribution.domain.models import Campaign, RawRecord


def is_all_campaigns(campaign_id: str | None) -> bool:
    return not campaign_id or campaign_id == ALL_CAMPAIGNS_ID


def filter_by_campaign(records: Sequence[RawRecord], campaign_id: str | None) -> Sequence[RawRecord]:
    """Keep records whose campaign equals ``campaign_id`` exactly; the sentinel passes everything."""
    if is_all_campaigns(campaign_id):
        return records
    return [record for record in records if record.campaign == campaign_id]


def extract_campaigns(records: Sequence[RawRecord]) -> list[Campaign]:
    names = {record.campaign.strip() for record in records if record.campaign and record.campaign.strip()}
    return [Campaign(id=name, name=name) for name in sorted(names)]


def campaigns_with_all(records: Sequence[RawRecord]) -> list[Campaign]:
    return [Campaign.all_campaigns(), *extract_campaigns(records)]
