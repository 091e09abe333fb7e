"""Tests for run display strings and examiner statistics."""

import pytest

from conftest import make_embedded_run, make_run
from examiner_ledger.dates import DateRange
from examiner_ledger.models import RunStatus
from examiner_ledger.services.display import (
    category_name,
    category_title,
    format_duration,
    game_to_string,
    platform_to_string,
    players_to_string,
    run_sort_value,
    status_to_string,
)
from examiner_ledger.services.stats import summarize

SM64 = {"id": "g1", "abbreviation": "sm64", "names": {"international": "Super Mario 64"}}
SUBCATEGORY = {
    "id": "var-1",
    "is-subcategory": True,
    "values": {"values": {"glitchless": {"label": "Glitchless"}}},
}
NOT_SUBCATEGORY = {
    "id": "var-2",
    "is-subcategory": False,
    "values": {"values": {"pal": {"label": "PAL"}}},
}


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        pytest.param(3723, "01:02:03", id="whole_seconds"),
        pytest.param(3723.5, "01:02:03.500", id="milliseconds"),
        pytest.param(59.999, "00:00:59.999", id="sub_minute"),
        pytest.param(0, "00:00:00", id="zero"),
    ],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


class TestCategoryTitle:

    def test_plain_run_uses_table(self):
        assert category_title(make_run("r1", category="cat-a"), {"cat-a": "Any%"}) == "Any%"

    def test_plain_run_without_table(self):
        assert category_title(make_run("r1", category="cat-a")) == "ID: cat-a"
        assert category_name("cat-x", {}) == "ID: cat-x"

    def test_only_subcategories_contribute(self):
        run = make_embedded_run(
            "r1",
            variables=[SUBCATEGORY, NOT_SUBCATEGORY],
            values={"var-1": "glitchless", "var-2": "pal"},
        )
        assert category_title(run) == "Any% - Glitchless"

    def test_unknown_label(self):
        run = make_embedded_run("r1", variables=[SUBCATEGORY], values={"var-1": "missing"})
        assert category_title(run) == "Any% - Unknown"

    def test_level_and_unresolved_category(self):
        run = make_embedded_run("r1", level_name="Castle", category_unresolved=True)
        assert category_title(run) == "Castle: Unknown"


class TestRunStrings:

    def test_players(self):
        run = make_embedded_run("r1", players=[
            {"rel": "user", "id": "u1", "names": {"international": "Alice"}},
            {"rel": "guest", "name": "Bob"},
        ])
        assert players_to_string(run.players) == "Alice, Bob"

    def test_plain_players_fall_back_to_ids(self):
        assert players_to_string(make_run("r1").players) == "player-1"

    def test_game(self):
        assert game_to_string(make_embedded_run("r1", game=SM64)) == "SM64"
        assert game_to_string(make_embedded_run("r1")) == "Unknown"
        assert game_to_string(make_run("r1")) == "Unknown"

    def test_platform(self):
        assert platform_to_string(make_embedded_run("r1")) == "Nintendo 64"
        assert platform_to_string(make_run("r1")) == "N/A"


class TestStatus:

    def test_pending_and_rejected(self):
        assert status_to_string(RunStatus(status="new")) == "Pending"
        assert status_to_string(RunStatus(status="rejected")) == "Rejected"

    def test_verified(self):
        assert status_to_string(RunStatus(status="verified")) == "Verified"
        assert status_to_string(RunStatus(status="verified", verify_date="2024-03-05T12:00:00Z")) == "2024-03-05"

    def test_sort_value_prefers_verify_date(self):
        older = make_run("older", verify_date="2024-03-01T12:00:00Z", date="2024-03-20")
        newer = make_run("newer", verify_date="2024-03-10T12:00:00Z", date="2024-01-01")
        assert run_sort_value(newer) > run_sort_value(older)


class TestSummarize:

    def test_statistics(self):
        runs = [
            make_run("r1", primary_t=10, verify_date="2024-03-02T12:00:00Z"),
            make_run("r2", primary_t=20, verify_date="2024-03-08T12:00:00Z"),
        ]
        stats = summarize(
            runs,
            total_runs=10,
            date_range=DateRange.from_dates("2024-03-01", "2024-03-10"),
            categories={"cat-a": "Any%"},
        )

        assert stats.runsExamined == 2
        assert stats.sharePercent == "20.00%"
        assert stats.averagePerDay == "0.20"
        assert stats.lastExamined == "2024-03-08"
        assert stats.mostFrequentCategory == "Any%"
        assert stats.averageDuration == "00:00:15"

    def test_embedded_game_prefixes_category(self):
        runs = [make_embedded_run("r1", game=SM64), make_embedded_run("r2", game=SM64)]
        assert summarize(runs).mostFrequentCategory == "SM64 - Any%"

    def test_empty(self):
        stats = summarize([])

        assert stats.runsExamined == 0
        assert stats.lastExamined is None
        assert stats.averageDuration is None
