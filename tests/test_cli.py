from __future__ import annotations

import json

import pytest

import main
from media_attribution.infrastructure.snapshot_store import JsonSnapshotStore


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    monkeypatch.setattr(main, "configure_logging", lambda verbose=False: None)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "store" / "datasets.json"


@pytest.fixture
def csv_files(tmp_path, sample_csv_text, second_csv_text):
    january = tmp_path / "january.csv"
    february = tmp_path / "february.csv"
    january.write_text(sample_csv_text, encoding="utf-8")
    february.write_text(second_csv_text, encoding="utf-8")
    return january, february


def _cli(store_path, *argv):
    return main.main(["--store", str(store_path), *argv])


def _dataset_ids(store_path):
    return [dataset.id for dataset in JsonSnapshotStore(store_path).load().datasets]


def test_upload_list_and_show(store_path, csv_files, capsys):
    assert _cli(store_path, "upload", str(csv_files[0])) == 0
    assert "Uploaded january" in capsys.readouterr().out

    assert _cli(store_path, "list") == 0
    assert "january.csv" in capsys.readouterr().out

    assert _cli(store_path, "show", "--sort", "publisher", "--direction", "asc") == 0
    out = capsys.readouterr().out
    assert out.index("Disney+") < out.index("Hulu")
    assert "* All Campaigns" in out


def test_campaign_filter_is_persisted(store_path, csv_files, capsys):
    _cli(store_path, "upload", str(csv_files[0]))
    (dataset_id,) = _dataset_ids(store_path)

    assert _cli(store_path, "campaign", dataset_id, "Campaign B") == 0
    capsys.readouterr()

    dataset = JsonSnapshotStore(store_path).load().datasets[0]
    assert dataset.selected_campaign == "Campaign B"
    assert [record.publisher for record in dataset.processed] == ["Disney+"]


def test_compare_and_export(store_path, csv_files, tmp_path, capsys):
    _cli(store_path, "upload", str(csv_files[0]))
    _cli(store_path, "upload", str(csv_files[1]), "--name", "Feb")
    first, second = _dataset_ids(store_path)
    capsys.readouterr()

    assert _cli(store_path, "compare", first, second) == 0
    out = capsys.readouterr().out
    assert "Feb Spend" in out
    assert "+20.0%" in out

    output = tmp_path / "summary.json"
    assert _cli(store_path, "export", str(output), "--dataset", first) == 0
    summary = json.loads(output.read_text(encoding="utf-8"))
    assert summary["dataset_name"] == "january"
    assert len(summary["comparison"]) == 3


def test_rename_activate_delete_clear(store_path, csv_files):
    _cli(store_path, "upload", str(csv_files[0]))
    _cli(store_path, "upload", str(csv_files[1]))
    first, second = _dataset_ids(store_path)

    _cli(store_path, "rename", first, "Q1")
    _cli(store_path, "activate", first)
    state = JsonSnapshotStore(store_path).load()
    assert state.datasets[0].name == "Q1"
    assert state.active_dataset_id == first

    _cli(store_path, "delete", first)
    assert JsonSnapshotStore(store_path).load().active_dataset_id == second

    _cli(store_path, "clear")
    assert JsonSnapshotStore(store_path).load().datasets == ()


def test_failures_exit_non_zero(store_path, tmp_path, capsys):
    bad = tmp_path / "bad.csv"
    bad.write_text("Publisher Name\nHulu\n", encoding="utf-8")

    assert _cli(store_path, "upload", str(bad)) == 1
    assert "Upload failed" in capsys.readouterr().err
    assert _cli(store_path, "show") == 1
    assert _cli(store_path, "campaign", "ghost", "Campaign A") == 1
    assert _cli(store_path, "export", str(tmp_path / "out.csv")) == 1
    assert not store_path.exists()
