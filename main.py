"""Media attribution command-line entrypoint."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Sequence

from media_attribution.application.dashboard_service import (
    active_dataset,
    clear_state,
    comparison_rows,
    delete_dataset,
    find_dataset,
    persist,
    rename_dataset,
    select_campaign,
    select_datasets_for_comparison,
    set_active_dataset,
    upload_file,
)
from media_attribution.application.export_service import export_report
from media_attribution.application.reporting.rendering import (
    render_campaigns,
    render_comparison_table,
    render_dataset_list,
    render_publisher_table,
    render_stats,
)
from media_attribution.config import CHART_PUBLISHER_LIMIT, configure_logging, default_store_path
from media_attribution.domain.models import DashboardState
from media_attribution.infrastructure.snapshot_store import JsonSnapshotStore
from media_attribution.infrastructure.upload_reader import format_file_size
from media_attribution.ranking import SORT_DIRECTIONS, SORT_FIELDS, sort_publishers

logger = logging.getLogger("media_attribution")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Aggregate and compare publisher performance exports")
    parser.add_argument("--store", type=Path, default=None, help="Dataset snapshot file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    upload = sub.add_parser("upload", help="Upload a CSV export as a new dataset")
    upload.add_argument("path", type=Path)
    upload.add_argument("--name", default=None, help="Dataset name (defaults to the file name)")
    upload.add_argument("--mime-type", default=None)

    sub.add_parser("list", help="List uploaded datasets")

    show = sub.add_parser("show", help="Show the publisher table of a dataset")
    show.add_argument("dataset_id", nargs="?", default=None)
    show.add_argument("--sort", choices=sorted(SORT_FIELDS), default=None)
    show.add_argument("--direction", choices=SORT_DIRECTIONS, default="desc")
    show.add_argument("--top", type=int, default=None, help=f"Only the first N rows (charts use {CHART_PUBLISHER_LIMIT})")

    campaign = sub.add_parser("campaign", help="Filter a dataset by campaign ('all' clears the filter)")
    campaign.add_argument("dataset_id")
    campaign.add_argument("campaign_id", nargs="?", default=None)

    rename = sub.add_parser("rename", help="Rename a dataset")
    rename.add_argument("dataset_id")
    rename.add_argument("name")

    delete = sub.add_parser("delete", help="Delete a dataset")
    delete.add_argument("dataset_id")

    activate = sub.add_parser("activate", help="Make a dataset the active one")
    activate.add_argument("dataset_id")

    sub.add_parser("clear", help="Remove every dataset")

    compare = sub.add_parser("compare", help="Compare two or more datasets side by side")
    compare.add_argument("dataset_ids", nargs="+")
    compare.add_argument("--top", type=int, default=None)

    export = sub.add_parser("export", help="Export to .xlsx, .json or .html")
    export.add_argument("output", type=Path)
    export.add_argument("--dataset", default=None)

    return parser.parse_args(argv)


def _fail(message: str) -> int:
    print(message, file=sys.stderr)
    return 1


def _show(state: DashboardState, args: argparse.Namespace) -> int:
    dataset = find_dataset(state, args.dataset_id) if args.dataset_id else active_dataset(state)
    if dataset is None:
        return _fail("No dataset loaded. Upload a CSV first.")

    records = list(dataset.processed)
    if args.sort:
        records = sort_publishers(records, args.sort, args.direction)
    if args.top:
        records = records[: args.top]

    print(f"{dataset.name} ({dataset.id})")
    print(render_campaigns(dataset.campaigns, dataset.selected_campaign))
    print()
    print(render_stats(dataset.stats))
    print()
    print(render_publisher_table(records))
    return 0


def run(args: argparse.Namespace) -> int:
    store = JsonSnapshotStore(args.store or default_store_path())
    logger.debug("Using snapshot store %s", store.path)
    state = store.load() or DashboardState()
    new_state = state

    if args.command == "upload":
        outcome = upload_file(state, args.path, name=args.name, mime_type=args.mime_type)
        if not outcome.ok or outcome.dataset is None:
            return _fail(f"Upload failed: {outcome.error}")
        new_state = outcome.state
        size = format_file_size(args.path.stat().st_size)
        print(f"Uploaded {outcome.dataset.name} ({size}) as {outcome.dataset.id}")
        print(render_stats(outcome.dataset.stats))
    elif args.command == "list":
        print(render_dataset_list(state))
        return 0
    elif args.command == "show":
        return _show(state, args)
    elif args.command == "campaign":
        if find_dataset(state, args.dataset_id) is None:
            return _fail(f"Unknown dataset: {args.dataset_id}")
        new_state = select_campaign(state, args.dataset_id, args.campaign_id)
        dataset = find_dataset(new_state, args.dataset_id)
        if dataset is not None:
            print(render_stats(dataset.stats))
    elif args.command == "rename":
        new_state = rename_dataset(state, args.dataset_id, args.name)
    elif args.command == "delete":
        new_state = delete_dataset(state, args.dataset_id)
    elif args.command == "activate":
        new_state = set_active_dataset(state, args.dataset_id)
    elif args.command == "clear":
        new_state = clear_state()
    elif args.command == "compare":
        new_state = replace(select_datasets_for_comparison(state, args.dataset_ids), comparison_mode=True)
        if args.top is None:
            rows = comparison_rows(new_state)
        else:
            rows = comparison_rows(new_state, limit=args.top)
        print(render_comparison_table(rows))
    elif args.command == "export":
        ok, message = export_report(state, args.output, dataset_id=args.dataset)
        if not ok:
            return _fail(f"Export failed: {message}")
        print(f"Saved: {args.output}")
        return 0

    if new_state is not state:
        persist(store, new_state)
    return 0


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(verbose=args.verbose)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
