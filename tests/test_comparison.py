from __future__ import annotations

import pytest

from media_attribution.comparison import (
    change_direction,
    compare_datasets,
    comparison_change,
    percent_change,
    rank_comparison_rows,
)
from media_attribution.domain.campaigns import filter_by_campaign
from media_attribution.domain.models import DatasetMetrics

from conftest import make_dataset, make_record


@pytest.fixture
def january():
    return make_dataset(
        "jan",
        [make_record("Hulu", 10000, 100.0), make_record("Roku", 5000, 50.0)],
        name="January",
    )


@pytest.fixture
def february():
    return make_dataset(
        "feb",
        [make_record("Roku", 8000, 120.0), make_record("Pluto", 1000, 300.0)],
        name="February",
    )


def test_needs_at_least_two_datasets(january):
    assert compare_datasets([]) == []
    assert compare_datasets([january]) == []


def test_union_of_publishers_with_zero_fill(january, february):
    rows = compare_datasets([january, february])

    assert [row.publisher for row in rows] == ["Hulu", "Pluto", "Roku"]
    hulu = rows[0]
    assert [slot.dataset_id for slot in hulu.datasets] == ["jan", "feb"]
    assert hulu.datasets[1] == DatasetMetrics(dataset_id="feb", dataset_name="February")
    assert hulu.datasets[0].spend == 100.0
    assert rows[1].datasets[0].impressions == 0


def test_rows_rank_by_total_spend(january, february):
    ranked = rank_comparison_rows(compare_datasets([january, february]))

    assert [row.publisher for row in ranked] == ["Pluto", "Roku", "Hulu"]
    assert ranked[1].total_spend == pytest.approx(170.0)
    assert [row.publisher for row in rank_comparison_rows(ranked, limit=1)] == ["Pluto"]


def test_publisher_missing_from_second_dataset_drops_to_minus_hundred(january, february):
    hulu = compare_datasets([january, february])[0]

    assert comparison_change(hulu, "spend") == pytest.approx(-100.0)
    assert change_direction(comparison_change(hulu, "spend")) == "down"


def test_publisher_new_in_second_dataset_has_no_change(january, february):
    pluto = compare_datasets([january, february])[1]

    assert comparison_change(pluto, "impressions") is None
    assert change_direction(None) == "flat"


def test_change_only_defined_for_two_datasets(january, february):
    march = make_dataset("mar", [make_record("Roku", 1, 1.0)])
    row = compare_datasets([january, february, march])[-1]

    assert row.publisher == "Roku"
    assert len(row.datasets) == 3
    assert comparison_change(row, "spend") is None


def test_unknown_metric_is_rejected(january, february):
    row = compare_datasets([january, february])[0]

    with pytest.raises(ValueError):
        comparison_change(row, "clicks")


def test_percent_change_values():
    assert percent_change(100.0, 150.0) == pytest.approx(50.0)
    assert percent_change(100.0, 0.0) == pytest.approx(-100.0)
    assert percent_change(0.0, 10.0) is None


@pytest.mark.parametrize(("change", "expected"), [(0.05, "flat"), (-0.09, "flat"), (0.1, "up"), (-12.0, "down")])
def test_change_direction_threshold(change, expected):
    assert change_direction(change) == expected


def test_comparison_reflects_campaign_filtered_views(january):
    scoped = make_dataset(
        "scoped",
        filter_by_campaign(
            [make_record("Hulu", 100, 10.0, campaign="Spring"), make_record("Hulu", 900, 90.0, campaign="Fall")],
            "Spring",
        ),
    )

    hulu = compare_datasets([january, scoped])[0]

    assert hulu.datasets[1].spend == 10.0
