from __future__ import annotations

from datetime import datetime

import pytest

from media_attribution.application.dashboard_service import (
    active_dataset,
    clear_state,
    comparison_rows,
    default_dataset_name,
    delete_dataset,
    find_dataset,
    persist,
    rename_dataset,
    select_campaign,
    select_datasets_for_comparison,
    set_active_dataset,
    toggle_comparison_mode,
    upload_dataset,
    upload_file,
)
from media_attribution.domain.models import Campaign, DashboardState, DashboardStats
from media_attribution.infrastructure.snapshot_store import InMemorySnapshotStore

UPLOADED_AT = datetime(2024, 1, 15, 9, 30)


@pytest.fixture
def loaded(sample_csv_text, second_csv_text) -> DashboardState:
    state = upload_dataset(DashboardState(), sample_csv_text, "january.csv", dataset_id="jan", now=UPLOADED_AT).state
    return upload_dataset(state, second_csv_text, "february.csv", dataset_id="feb", now=UPLOADED_AT).state


def test_upload_adds_an_active_dataset(sample_csv_text):
    outcome = upload_dataset(DashboardState(), sample_csv_text, "jan_data.CSV", now=UPLOADED_AT)

    assert outcome.ok
    dataset = outcome.dataset
    assert dataset.name == "jan_data"
    assert dataset.id.startswith("dataset_")
    assert dataset.uploaded_at == UPLOADED_AT
    assert outcome.state.datasets == (dataset,)
    assert outcome.state.active_dataset_id == dataset.id
    assert dataset.selected_campaign == "all"
    assert dataset.campaigns == (
        Campaign("all", "All Campaigns"),
        Campaign("Campaign A", "Campaign A"),
        Campaign("Campaign B", "Campaign B"),
    )
    assert [record.publisher for record in dataset.processed] == ["Hulu", "Disney+"]
    assert dataset.stats == DashboardStats(total_impressions=45000, total_spend=2250.0, average_cpm=50.0)


def test_upload_uses_the_given_name(sample_csv_text):
    outcome = upload_dataset(DashboardState(), sample_csv_text, "jan.csv", name="  Q1 export ")

    assert outcome.dataset.name == "Q1 export"


def test_uploads_at_the_same_instant_get_distinct_ids(sample_csv_text):
    first = upload_dataset(DashboardState(), sample_csv_text, "a.csv", now=UPLOADED_AT)
    second = upload_dataset(first.state, sample_csv_text, "b.csv", now=UPLOADED_AT)

    assert second.dataset.id == f"{first.dataset.id}_2"
    assert len(second.state.datasets) == 2


def test_failed_upload_leaves_state_untouched(loaded):
    outcome = upload_dataset(loaded, "Publisher Name,Impressions\nHulu,10\n", "broken.csv")

    assert not outcome.ok
    assert outcome.state is loaded
    assert outcome.dataset is None
    assert "Advertiser Cost (Adv Currency)" in outcome.error
    assert "Campaign" in outcome.error


def test_empty_upload_reports_empty_message():
    outcome = upload_dataset(DashboardState(), "", "empty.csv")

    assert outcome.error == "CSV file is empty. Please upload a file with data."


def test_default_dataset_name_strips_csv_suffix_only():
    assert default_dataset_name("report.final.CSV") == "report.final"
    assert default_dataset_name("notes.txt") == "notes.txt"


def test_select_campaign_reaggregates_without_mutating(loaded):
    filtered = select_campaign(loaded, "jan", "Campaign B")

    dataset = find_dataset(filtered, "jan")
    assert dataset.selected_campaign == "Campaign B"
    assert [(r.publisher, r.spend_percentage) for r in dataset.processed] == [("Disney+", 100.0)]
    assert dataset.stats.total_spend == 1000.0
    assert len(dataset.raw_records) == 3
    assert len(find_dataset(loaded, "jan").processed) == 2


@pytest.mark.parametrize("campaign_id", ["all", None, ""])
def test_all_campaigns_sentinel_restores_full_view(loaded, campaign_id):
    restored = select_campaign(select_campaign(loaded, "jan", "Campaign B"), "jan", campaign_id)

    dataset = find_dataset(restored, "jan")
    assert dataset.selected_campaign == "all"
    assert dataset.processed == find_dataset(loaded, "jan").processed


def test_unknown_campaign_gives_an_empty_view(loaded):
    dataset = find_dataset(select_campaign(loaded, "jan", "campaign a"), "jan")

    assert dataset.processed == ()
    assert dataset.stats == DashboardStats()


def test_select_campaign_on_missing_dataset_is_a_no_op(loaded):
    assert select_campaign(loaded, "ghost", "Campaign A") is loaded


def test_rename_trims_and_ignores_blank_names(loaded):
    renamed = rename_dataset(loaded, "feb", "  February  ")

    assert find_dataset(renamed, "feb").name == "February"
    assert rename_dataset(loaded, "feb", "   ") is loaded
    assert rename_dataset(loaded, "ghost", "Name") is loaded


def test_delete_moves_active_dataset_and_clears_selection(loaded):
    state = select_datasets_for_comparison(set_active_dataset(loaded, "jan"), ["jan", "feb"])

    after = delete_dataset(state, "jan")

    assert [dataset.id for dataset in after.datasets] == ["feb"]
    assert after.active_dataset_id == "feb"
    assert after.selected_dataset_ids == ("feb",)
    assert active_dataset(delete_dataset(after, "feb")) is None


def test_delete_inactive_dataset_keeps_active(loaded):
    after = delete_dataset(loaded, "jan")

    assert after.active_dataset_id == "feb"


def test_set_active_ignores_unknown_ids(loaded):
    assert set_active_dataset(loaded, "jan").active_dataset_id == "jan"
    assert set_active_dataset(loaded, "ghost") is loaded


def test_comparison_selection_keeps_known_ids_in_order(loaded):
    state = select_datasets_for_comparison(loaded, ["feb", "ghost", "jan", "feb"])

    assert state.selected_dataset_ids == ("feb", "jan")


def test_comparison_rows_follow_the_selection(loaded):
    assert comparison_rows(select_datasets_for_comparison(loaded, ["jan"])) == []

    rows = comparison_rows(select_datasets_for_comparison(loaded, ["jan", "feb"]))

    assert [row.publisher for row in rows] == ["Hulu", "Disney+", "Pluto"]
    assert [slot.spend for slot in rows[0].datasets] == [1250.0, 1500.0]


def test_toggle_and_clear(loaded):
    toggled = toggle_comparison_mode(loaded)

    assert toggled.comparison_mode is True
    assert toggle_comparison_mode(toggled).comparison_mode is False
    assert clear_state() == DashboardState()


def test_upload_file_rejects_other_file_types(tmp_path):
    path = tmp_path / "report.xlsx"
    path.write_bytes(b"not a csv")

    outcome = upload_file(DashboardState(), path)

    assert outcome.error == "Please upload a CSV file"


def test_upload_file_accepts_csv_mime_type(tmp_path, sample_csv_text):
    path = tmp_path / "export.dat"
    path.write_text(sample_csv_text, encoding="utf-8")

    outcome = upload_file(DashboardState(), path, mime_type="text/csv", now=UPLOADED_AT)

    assert outcome.ok
    assert outcome.dataset.file_name == "export.dat"


def test_upload_file_reports_unreadable_files(tmp_path):
    outcome = upload_file(DashboardState(), tmp_path / "missing.csv")

    assert outcome.error.startswith("Failed to parse CSV")


class _BrokenStore:
    def save(self, state):
        raise OSError("disk full")

    def load(self):
        return None


def test_persist_reports_failures_without_raising(loaded):
    store = InMemorySnapshotStore()

    assert persist(store, loaded) is True
    assert store.load() is loaded
    assert persist(_BrokenStore(), loaded) is False
