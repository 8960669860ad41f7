"""Domain layer package."""

from .campaigns import campaigns_with_all, extract_campaigns, filter_by_campaign, is_all_campaigns
from .errors import CsvInputError, EmptyInputError, ParseError, ValidationError
from .models import (
    AggregatedPublisherRecord,
    Campaign,
    ComparisonRow,
    DashboardState,
    DashboardStats,
    Dataset,
    DatasetMetrics,
    RawRecord,
)

__all__ = [
    "AggregatedPublisherRecord",
    "Campaign",
    "ComparisonRow",
    "CsvInputError",
    "DashboardState",
    "DashboardStats",
    "Dataset",
    "DatasetMetrics",
    "EmptyInputError",
    "ParseError",
    "RawRecord",
    "ValidationError",
    "campaigns_with_all",
    "extract_campaigns",
    "filter_by_campaign",
    "is_all_campaigns",
]
