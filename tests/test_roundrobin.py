"""Tests for roundrobin.py — pairing generation and verification."""

from collections import Counter, defaultdict

import pytest

from seasonsched.errors import InsufficientTeams, InvalidCycleCount
from seasonsched.models import Pairing
from seasonsched.roundrobin import (
    expected_pairing_count,
    generate_pairings,
    verify_pairings,
)


def _home_away(pairings):
    home = Counter(p.home for p in pairings)
    away = Counter(p.away for p in pairings)
    return home, away


class TestGeneratePairings:
    def test_four_teams_exact_order(self):
        pairings = generate_pairings(["A", "B", "C", "D"], 1)
        assert [(p.round_number, p.home, p.away) for p in pairings] == [
            (1, "A", "D"), (1, "B", "C"),
            (2, "C", "A"), (2, "D", "B"),
            (3, "A", "B"), (3, "C", "D"),
        ]

    def test_even_teams_rounds(self):
        pairings = generate_pairings(["A", "B", "C", "D", "E", "F"], 1)
        by_round = Counter(p.round_number for p in pairings)
        assert len(by_round) == 5
        assert all(c == 3 for c in by_round.values())

    def test_odd_teams_rounds_with_bye(self):
        teams = ["A", "B", "C", "D", "E"]
        pairings = generate_pairings(teams, 1)
        by_round = defaultdict(set)
        for p in pairings:
            by_round[p.round_number].update((p.home, p.away))
        assert len(by_round) == 5
        # Each round leaves exactly one team resting, and every team rests once
        resting = [next(iter(set(teams) - playing)) for playing in by_round.values()]
        assert sorted(resting) == teams

    @pytest.mark.parametrize("n", [2, 3, 4, 5, 6, 7, 10, 13])
    @pytest.mark.parametrize("cycles", [1, 2, 3])
    def test_count_and_coverage(self, n, cycles):
        teams = [f"T{i:02d}" for i in range(n)]
        pairings = generate_pairings(teams, cycles)
        assert len(pairings) == expected_pairing_count(n, cycles)
        assert len(pairings) == cycles * n * (n - 1) // 2
        result = verify_pairings(pairings, teams, cycles)
        assert result["valid"], result["errors"]
        for count in result["matchup_counts"].values():
            assert count == cycles

    @pytest.mark.parametrize("n", [2, 3, 4, 5, 6, 7, 8, 9, 12])
    @pytest.mark.parametrize("cycles", [1, 2, 3])
    def test_home_away_balance(self, n, cycles):
        teams = [f"T{i:02d}" for i in range(n)]
        home, away = _home_away(generate_pairings(teams, cycles))
        for t in teams:
            assert abs(home[t] - away[t]) <= 1, (t, home[t], away[t])

    def test_second_cycle_swaps_first(self):
        pairings = generate_pairings(["A", "B", "C", "D"], 3)
        first = [(p.home, p.away) for p in pairings if p.cycle == 1]
        second = [(p.home, p.away) for p in pairings if p.cycle == 2]
        third = [(p.home, p.away) for p in pairings if p.cycle == 3]
        assert second == [(a, h) for h, a in first]
        assert third == first

    def test_deterministic(self):
        teams = ["A", "B", "C", "D", "E", "F", "G"]
        assert generate_pairings(teams, 2) == generate_pairings(teams, 2)

    def test_input_order_matters(self):
        p1 = generate_pairings(["A", "B", "C", "D"], 1)
        p2 = generate_pairings(["D", "C", "B", "A"], 1)
        assert p1 != p2

    def test_two_teams(self):
        assert generate_pairings(["A", "B"], 2) == [
            Pairing("A", "B", 1, 1),
            Pairing("B", "A", 2, 1),
        ]

    def test_one_team_fails(self):
        with pytest.raises(InsufficientTeams):
            generate_pairings(["A"], 1)

    def test_empty_fails(self):
        with pytest.raises(InsufficientTeams):
            generate_pairings([], 1)

    def test_zero_cycles_fails(self):
        with pytest.raises(InvalidCycleCount):
            generate_pairings(["A", "B"], 0)

    def test_duplicate_ids_fail(self):
        with pytest.raises(ValueError):
            generate_pairings(["A", "B", "A"], 1)


class TestVerifyPairings:
    def test_detects_missing_matchup(self):
        pairings = [Pairing("A", "B", 1, 1), Pairing("A", "C", 1, 2)]
        result = verify_pairings(pairings, ["A", "B", "C"], 1)
        assert not result["valid"]
        assert any("B vs C" in e for e in result["errors"])

    def test_detects_duplicate_in_cycle(self):
        pairings = [
            Pairing("A", "B", 1, 1),
            Pairing("B", "A", 1, 2),
        ]
        result = verify_pairings(pairings, ["A", "B"], 1)
        assert not result["valid"]
        assert any("twice in cycle 1" in e for e in result["errors"])

    def test_detects_team_twice_in_round(self):
        pairings = [Pairing("A", "B", 1, 1), Pairing("A", "C", 1, 1),
                    Pairing("B", "C", 1, 2)]
        result = verify_pairings(pairings, ["A", "B", "C"], 1)
        assert not result["valid"]
        assert any("A appears twice" in e for e in result["errors"])

    def test_detects_missing_alternation(self):
        pairings = [Pairing("A", "B", 1, 1), Pairing("A", "B", 2, 1)]
        result = verify_pairings(pairings, ["A", "B"], 2)
        assert not result["valid"]
        assert any("cycles 1 and 2" in e for e in result["errors"])

    def test_detects_unknown_team(self):
        pairings = [Pairing("A", "X", 1, 1)]
        result = verify_pairings(pairings, ["A", "B"], 1)
        assert not result["valid"]
        assert any("Unknown team X" in e for e in result["errors"])
