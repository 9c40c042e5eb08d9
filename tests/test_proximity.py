"""Tests for the proximity analysis and the near-enemy predicate."""

from __future__ import annotations

import math

import pytest

from factionmap.proximity import analyze, distance, near_enemy
from tests.helpers import make_set, make_system


class TestDistance:
    def test_three_four_five(self):
        assert distance(make_system("A", 0, 0, 0), make_system("B", 3, 4, 0)) == 5.0

    def test_uses_all_three_axes(self):
        d = distance(make_system("C", 0, 0, 0), make_system("D", 1, 1, 1))
        assert d == pytest.approx(math.sqrt(3))
        assert d == pytest.approx(1.7320508)

    def test_y_is_not_ignored(self):
        assert distance(make_system("A", 0, 0, 0), make_system("B", 0, 12, 0)) == 12.0


class TestAnalyze:
    def test_single_pair_scenario(self, skirmish):
        primary, rival = skirmish
        report = analyze(primary, rival, 30.0)

        assert report.overlap_systems == ()
        nearby = report.nearby_map()
        assert list(nearby) == ["R"]
        [(p, d)] = nearby["R"].nearby_primary_systems
        assert p.name == "P"
        assert d == 10.0

    def test_shared_system_is_overlap_only(self):
        primary = make_set("Canonn", make_system("Sol", 0, 0, 0), make_system("Alpha", 5, 0, 0))
        rival = make_set("Rivals", make_system("Sol", 0, 0, 0), make_system("Beta", 6, 0, 0))
        report = analyze(primary, rival, 30.0)

        assert [s.name for s in report.overlap_systems] == ["Sol"]
        assert "Sol" not in report.nearby_map()
        assert list(report.nearby_map()) == ["Beta"]

    def test_threshold_is_inclusive(self):
        primary = make_set("Canonn", make_system("P", 0, 0, 0))
        rival = make_set("Rivals", make_system("R", 3, 4, 0))
        assert len(analyze(primary, rival, 5.0).nearby) == 1

    def test_just_beyond_threshold_is_excluded(self):
        primary = make_set("Canonn", make_system("P", 0, 0, 0))
        rival = make_set("Rivals", make_system("R", 5.000001, 0, 0))
        assert analyze(primary, rival, 5.0).nearby == ()

    def test_matches_sorted_by_distance_with_stable_ties(self):
        primary = make_set(
            "Canonn",
            make_system("Far", 20, 0, 0),
            make_system("TieFirst", 0, 10, 0),
            make_system("Near", 2, 0, 0),
            make_system("TieSecond", 0, 0, 10),
        )
        rival = make_set("Rivals", make_system("R", 0, 0, 0))
        match = analyze(primary, rival, 30.0).nearby[0]
        assert [p.name for p, _ in match.nearby_primary_systems] == ["Near", "TieFirst", "TieSecond", "Far"]

    def test_rival_without_neighbours_is_omitted(self):
        primary = make_set("Canonn", make_system("P", 0, 0, 0))
        rival = make_set("Rivals", make_system("Close", 1, 0, 0), make_system("Remote", 900, 0, 0))
        assert list(analyze(primary, rival, 30.0).nearby_map()) == ["Close"]

    def test_nearby_follows_rival_order(self):
        primary = make_set("Canonn", make_system("P", 0, 0, 0))
        rival = make_set("Rivals", make_system("Z", 2, 0, 0), make_system("A", 1, 0, 0))
        assert [m.rival_system.name for m in analyze(primary, rival, 30.0).nearby] == ["Z", "A"]

    def test_repeat_runs_are_identical(self):
        primary = make_set("Canonn", *[make_system(f"P{i}", i * 3, i, -i) for i in range(15)])
        rival = make_set("Rivals", *[make_system(f"R{i}", i * 2, -i, i) for i in range(15)]
                         + [make_system("P4", 12, 4, -4)])
        first = analyze(primary, rival, 20.0)
        second = analyze(primary, rival, 20.0)
        assert first == second
        assert repr(first.nearby) == repr(second.nearby)

    def test_empty_sets(self):
        report = analyze(make_set("Canonn"), make_set("Rivals"), 30.0)
        assert report.overlap_systems == ()
        assert report.nearby == ()


class TestNearEnemy:
    def test_symmetric_marks_both_sides(self, skirmish):
        primary, rival = skirmish
        assert near_enemy(primary, rival, 30.0, "symmetric") == ({"P"}, {"R"})

    def test_asymmetric_marks_primary_only(self, skirmish):
        primary, rival = skirmish
        assert near_enemy(primary, rival, 30.0, "asymmetric") == ({"P"}, set())

    def test_only_controlled_systems_count(self):
        primary = make_set("Canonn", make_system("P", 0, 0, 0))                   # present only
        rival = make_set("Rivals", make_system("R", 10, 0, 0, "Someone Else"))    # not rival-controlled
        assert near_enemy(primary, rival, 30.0) == (set(), set())

    def test_out_of_range(self, skirmish):
        primary, rival = skirmish
        assert near_enemy(primary, rival, 9.99) == (set(), set())

    def test_unknown_mode(self, skirmish):
        with pytest.raises(ValueError):
            near_enemy(*skirmish, 30.0, "sideways")
