"""Runtime settings with environment overrides."""

from __future__ import annotations

import logging
import os
from pathlib import Path

PUBLISHER_NAME_COLUMN = "Publisher Name"
TAIL_PUBLISHER_COLUMN = "Publisher Name (with tail aggregation)"
IMPRESSIONS_COLUMN = "Impressions"
COST_COLUMN = "Advertiser Cost (Adv Currency)"
CAMPAIGN_COLUMN = "Campaign"
ADVERTISER_COLUMN = "Advertiser"
MEDIA_TYPE_COLUMN = "Media Type"
SITE_COLUMN = "Site"

REQUIRED_COLUMNS: tuple[str, ...] = (
    PUBLISHER_NAME_COLUMN,
    IMPRESSIONS_COLUMN,
    COST_COLUMN,
    CAMPAIGN_COLUMN,
)
NUMERIC_COLUMNS: tuple[str, ...] = (IMPRESSIONS_COLUMN, COST_COLUMN)

ALL_CAMPAIGNS_ID = "all"
ALL_CAMPAIGNS_NAME = "All Campaigns"

DEFAULT_PUBLISHER_LIMIT = 25
CHART_PUBLISHER_LIMIT = 10
MAX_REASONABLE_CPM = 1000.0

ACCEPTED_EXTENSIONS: tuple[str, ...] = (".csv", ".txt")
ACCEPTED_MIME_TYPES: tuple[str, ...] = ("text/csv", "text/plain", "application/csv")

DEFAULT_STORE_PATH = Path(".media_attribution") / "datasets.json"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _publisher_limit() -> int:
    raw = os.getenv("MEDIA_ATTRIBUTION_PUBLISHER_LIMIT", str(DEFAULT_PUBLISHER_LIMIT))
    try:
        limit = int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid MEDIA_ATTRIBUTION_PUBLISHER_LIMIT: {raw}") from exc
    if limit <= 0:
        raise ValueError(f"MEDIA_ATTRIBUTION_PUBLISHER_LIMIT must be positive, got {limit}")
    return limit


def _log_level() -> str:
    raw = os.getenv("MEDIA_ATTRIBUTION_LOG_LEVEL", "INFO").strip().upper()
    if raw not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ValueError(f"Invalid MEDIA_ATTRIBUTION_LOG_LEVEL: {raw}")
    return raw


TOP_PUBLISHER_LIMIT = _publisher_limit()
LOG_LEVEL = _log_level()


def default_store_path() -> Path:
    raw = os.getenv("MEDIA_ATTRIBUTION_STORE", "").strip()
    if raw:
        return Path(raw)
    return DEFAULT_STORE_PATH


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, LOG_LEVEL)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        force=True,
    )
