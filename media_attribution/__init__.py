"""Publisher performance pipeline for ad-campaign exports."""

from .application import UploadOutcome, export_report, upload_dataset
from .aggregation import AggregationEngine, aggregate, calculate_dashboard_stats
from .comparison import ComparisonEngine, compare_datasets, percent_change
from .domain import DashboardState
from .ingestion import ParseResult, parse_csv_text
from .ranking import sort_publishers

__all__ = [
    "AggregationEngine",
    "ComparisonEngine",
    "DashboardState",
    "ParseResult",
    "UploadOutcome",
    "aggregate",
    "calculate_dashboard_stats",
    "compare_datasets",
    "export_report",
    "parse_csv_text",
    "percent_change",
    "sort_publishers",
    "upload_dataset",
]
