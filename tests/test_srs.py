"""Tests for the item scheduler: statistics, normalization, scoring, selection."""

import math

import pytest

from backend.srs.attempts import Attempt, AttemptLog
from backend.srs.normalize import RANGE_FLOOR, normalize, weighted_average
from backend.srs.scorer import score, threshold_pool_size
from backend.srs.selector import next_item, select, working_set
from backend.srs.stats import UNSEEN_MEAN_ERROR, ItemStats, build_stats

ROSTER = ("A", "B", "C", "D", "E")


def _scenario_log() -> AttemptLog:
    return AttemptLog.from_records([("A", 0.0), ("B", 1.0), ("C", 0.5)])


# --- Attempt log ---


class TestAttemptLog:
    def test_append_numbers_sequentially(self) -> None:
        log = AttemptLog().append("A", 0.5).append("B", 1.0)
        assert [a.sequence for a in log] == [0, 1]
        assert log[1].item == "B"

    def test_append_does_not_mutate(self) -> None:
        log = AttemptLog()
        longer = log.append("A", 0.0)
        assert len(log) == 0
        assert len(longer) == 1

    def test_rejects_gap_in_sequence(self) -> None:
        with pytest.raises(ValueError):
            AttemptLog((Attempt("A", 0.0, 0), Attempt("B", 0.0, 2)))

    def test_rejects_out_of_range_distance(self) -> None:
        with pytest.raises(ValueError):
            Attempt("A", 1.5, 0)
        with pytest.raises(ValueError):
            Attempt("A", math.nan, 0)


# --- Stats builder ---


class TestBuildStats:
    def test_scenario(self) -> None:
        table = build_stats(_scenario_log(), ROSTER, forgiveness_window=2, set_size=5)
        assert table["A"].mean_error == 0.0
        assert table["A"].last_seen == 3
        assert table["B"].mean_error == 0.5
        assert table["B"].last_seen == 2
        assert table["C"].mean_error == 0.25
        assert table["C"].last_seen == 1
        for item in ("D", "E"):
            assert table[item].mean_error == UNSEEN_MEAN_ERROR
            assert table[item].last_seen == 6
            assert table[item].recent_attempts == []

    def test_empty_log_keeps_defaults(self) -> None:
        table = build_stats(AttemptLog(), ROSTER, forgiveness_window=2, set_size=3)
        assert list(table) == list(ROSTER)
        assert all(s.mean_error == 0.1 and s.last_seen == 4 for s in table.values())

    def test_mean_divides_by_window_not_count(self) -> None:
        log = AttemptLog.from_records([("A", 1.0)])
        table = build_stats(log, ["A"], forgiveness_window=4, set_size=3)
        assert table["A"].mean_error == 0.25

    def test_keeps_only_most_recent_attempts(self) -> None:
        log = AttemptLog.from_records([("A", 1.0), ("A", 1.0), ("B", 0.0), ("A", 0.0), ("A", 0.5)])
        table = build_stats(log, ["A", "B"], forgiveness_window=2, set_size=3)
        recent = table["A"].recent_attempts
        assert [a.sequence for a in recent] == [4, 3]
        assert table["A"].mean_error == 0.25
        assert table["A"].last_seen == 1
        assert table["B"].last_seen == 3

    def test_ignores_items_outside_roster(self) -> None:
        log = AttemptLog.from_records([("Z", 1.0), ("A", 0.5)])
        table = build_stats(log, ["A"], forgiveness_window=2, set_size=3)
        assert list(table) == ["A"]
        assert table["A"].last_seen == 1

    def test_empty_roster(self) -> None:
        assert build_stats(_scenario_log(), [], 2, 3) == {}


# --- Normalizer ---


class TestNormalize:
    def test_min_max(self) -> None:
        values = [2.0, 4.0, 6.0]
        norm = normalize(values, lambda v: v)
        assert [norm(v) for v in values] == [0.0, 0.5, 1.0]

    def test_single_element_returns_raw_value(self) -> None:
        norm = normalize([7.0], lambda v: v)
        assert norm(7.0) == 7.0

    def test_zero_range_uses_floor(self) -> None:
        norm = normalize([0.0, 0.0], lambda v: v)
        assert norm(0.0) == 0.0
        # Values outside the observed range grow large instead of dividing by zero
        assert norm(RANGE_FLOOR) == 1.0
        assert norm(1.0) == 1 / RANGE_FLOOR

    def test_empty_is_nan(self) -> None:
        norm = normalize([], lambda v: v)
        assert math.isnan(norm(1.0))

    def test_nan_values_ignored_for_range(self) -> None:
        values = [math.nan, 0.0, 2.0]
        norm = normalize(values, lambda v: v)
        assert norm(2.0) == 1.0
        assert math.isnan(norm(math.nan))

    def test_weighted_average(self) -> None:
        assert weighted_average([(1.0, 1.0), (0.0, 1.0)]) == 0.5
        assert weighted_average([(1.0, 3.0), (0.0, 1.0)]) == 0.75


# --- Scorer ---


class TestScorer:
    def test_threshold_pool_no_hard_items(self) -> None:
        stats = [ItemStats("A", 0.5), ItemStats("B", 0.2)]
        assert threshold_pool_size(stats, 3) == 3

    def test_threshold_pool_counts_leading_hard_items(self) -> None:
        stats = [ItemStats(str(i), 1.0) for i in range(4)] + [ItemStats("x", 0.2)]
        assert threshold_pool_size(stats, 3) == 6

    def test_threshold_pool_monotone_and_multiple(self) -> None:
        previous = 0
        for hard in range(0, 12):
            stats = [ItemStats(f"h{i}", 1.0) for i in range(hard)] + [ItemStats("easy", 0.0)]
            pool = threshold_pool_size(stats, 4)
            assert pool >= previous
            assert pool > 0 and pool % 4 == 0
            previous = pool

    def test_scenario_scores(self) -> None:
        table = build_stats(_scenario_log(), ROSTER, 2, 5)
        scored = score(table, 5)
        by_item = {s.item: value for s, value in scored}
        assert by_item["D"] == pytest.approx(0.9)
        assert by_item["E"] == pytest.approx(0.9)
        assert by_item["A"] == pytest.approx(0.7)
        assert by_item["C"] == pytest.approx(0.25)
        assert by_item["B"] == pytest.approx(0.1)
        assert [s.item for s, _ in scored] == ["D", "E", "A", "C", "B"]

    def test_cold_start_ties_keep_roster_order(self) -> None:
        roster = [f"w{i}" for i in range(10)]
        scored = score(build_stats(AttemptLog(), roster, 2, 3), 3)
        assert [s.item for s, _ in scored] == roster
        assert all(value == pytest.approx(0.5) for _, value in scored)

    def test_nan_score_in_pool_is_forced_to_one(self) -> None:
        table = {
            "A": ItemStats("A", mean_error=math.nan, last_seen=2),
            "B": ItemStats("B", mean_error=0.5, last_seen=1),
        }
        scored = score(table, 3)
        assert scored[0][0].item == "A"
        assert scored[0][1] == 1.0

    def test_nan_score_outside_pool_sorts_last(self) -> None:
        table = {f"h{i}": ItemStats(f"h{i}", mean_error=0.5, last_seen=2) for i in range(5)}
        table["x"] = ItemStats("x", mean_error=math.nan, last_seen=1)
        scored = score(table, 2)
        # x sorts to index 5 in the mean-error order, past the pool of 2
        assert scored[-1][0].item == "x"
        assert math.isnan(scored[-1][1])

    def test_nan_override_includes_pool_boundary(self) -> None:
        table = {
            "h0": ItemStats("h0", mean_error=0.5, last_seen=1),
            "h1": ItemStats("h1", mean_error=0.3, last_seen=2),
            "x": ItemStats("x", mean_error=math.nan, last_seen=1),
            "y": ItemStats("y", mean_error=math.nan, last_seen=1),
        }
        scored = score(table, 2)
        by_item = {s.item: value for s, value in scored}
        # Pool is 2: x sits at index 2, y at index 3 of the mean-error order
        assert by_item["x"] == 1.0
        assert math.isnan(by_item["y"])
        assert scored[-1][0].item == "y"


# --- Selector ---


class TestSelector:
    def test_empty_returns_none(self) -> None:
        assert select([], 0, 3) is None
        assert next_item(AttemptLog(), [], 2, 3) is None

    def test_working_set_sorted_by_recency(self) -> None:
        log = AttemptLog.from_records([(c, 0.5) for c in "ABCDEFAB"])
        scored = score(build_stats(log, "ABCDEFGH", 2, 4), 4)
        members = working_set(scored, 4)
        assert len(members) == 4
        seen = [s.last_seen for s in members]
        assert seen == sorted(seen, reverse=True)

    def test_rotation_visits_each_member_once(self) -> None:
        scored = score(build_stats(_scenario_log(), ROSTER, 2, 5), 5)
        picks = [select(scored, i, 5).item for i in range(5)]
        assert sorted(picks) == sorted(ROSTER)
        for i in range(5):
            assert select(scored, i, 5) is select(scored, i + 5, 5)

    def test_scenario_next_item(self) -> None:
        # Working set in presentation order: D, E, A, B, C
        assert next_item(_scenario_log(), ROSTER, 2, 5, attempt_index=3) == "B"
        assert next_item(_scenario_log(), ROSTER, 2, 5) == "B"

    def test_deterministic(self) -> None:
        log = _scenario_log()
        results = {next_item(log, ROSTER, 2, 5, attempt_index=7) for _ in range(5)}
        assert len(results) == 1

    def test_cold_start_never_none(self) -> None:
        roster = [f"w{i}" for i in range(7)]
        for i in range(10):
            assert next_item(AttemptLog(), roster, 2, 3, attempt_index=i) in roster[:3]

    def test_roster_smaller_than_set(self) -> None:
        assert next_item(AttemptLog(), ["only"], 2, 3, attempt_index=5) == "only"
