"""Tests for per-examiner aggregation."""

import asyncio

from conftest import FakeDataSource, make_run, make_user
from examiner_ledger.services.aggregation import AggregationBuilder
from examiner_ledger.services.identity_cache import IdentityCache


def runs_for(examiner_id, count, prefix=None):
    prefix = prefix or examiner_id
    return [make_run(f"{prefix}-{i}", examiner=examiner_id) for i in range(count)]


def build(datasource, batches, pronoun_filter=None):
    builder = AggregationBuilder(IdentityCache(datasource), pronoun_filter)

    async def scenario():
        snapshot = None
        for batch in batches:
            snapshot = await builder.add_batch(batch)
        return snapshot

    return builder, asyncio.run(scenario())


USERS = {
    "a": make_user("a", "Alpha", pronouns="She/Her"),
    "b": make_user("b", "Bravo", pronouns="He/Him"),
    "c": make_user("c", "Charlie"),
    "d": make_user("d", "Delta", pronouns="They/Them"),
}


class TestRanking:

    def test_sorted_by_count_with_stable_ties(self):
        datasource = FakeDataSource(users=USERS)
        batch = runs_for("a", 3) + runs_for("b", 5) + runs_for("c", 5) + runs_for("d", 1)

        _, snapshot = build(datasource, [batch])

        assert [e.run_count for e in snapshot.examiners] == [5, 5, 3, 1]
        assert [e.id for e in snapshot.examiners] == ["b", "c", "a", "d"]

    def test_chart_mirrors_ranking(self):
        datasource = FakeDataSource(users=USERS)
        _, snapshot = build(datasource, [runs_for("a", 1) + runs_for("b", 2)])

        assert [(c.title, c.value) for c in snapshot.chart] == [("Bravo", 2), ("Alpha", 1)]

    def test_accumulates_across_batches(self):
        datasource = FakeDataSource(users=USERS)
        _, snapshot = build(datasource, [runs_for("a", 2, "x"), runs_for("a", 3, "y")])

        assert [e.run_count for e in snapshot.examiners] == [5]
        assert snapshot.total_runs == 5
        assert datasource.count("user") == 1

    def test_skips_unverified_runs(self):
        datasource = FakeDataSource(users=USERS)
        batch = runs_for("a", 2) + [
            make_run("pending", status="new"),
            make_run("rejected", status="rejected", examiner="b"),
        ]

        _, snapshot = build(datasource, [batch])

        assert [e.id for e in snapshot.examiners] == ["a"]
        assert snapshot.total_runs == 4


class TestPronounFilter:

    def test_filters_examiners_after_ranking(self):
        datasource = FakeDataSource(users=USERS)
        batch = runs_for("a", 3) + runs_for("b", 5) + runs_for("c", 1)

        _, snapshot = build(datasource, [batch], pronoun_filter="She")

        assert [e.id for e in snapshot.examiners] == ["a"]

    def test_null_keeps_examiners_without_pronouns(self):
        datasource = FakeDataSource(users=USERS)
        batch = runs_for("a", 3) + runs_for("c", 1)

        _, snapshot = build(datasource, [batch], pronoun_filter="null")

        assert [e.id for e in snapshot.examiners] == ["c"]


def test_unresolved_examiners_are_reported():
    datasource = FakeDataSource(users=USERS)
    builder, snapshot = build(datasource, [runs_for("a", 1) + runs_for("ghost", 2)])

    assert builder.unresolved == ["ghost"]
    assert [e.name for e in snapshot.examiners] == ["ghost", "Alpha"]
