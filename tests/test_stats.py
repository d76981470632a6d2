"""Tests for stats.py — balance statistics and report formatting."""

from datetime import date

from seasonsched.models import Game, GameState
from seasonsched.stats import compute_stats, format_stats_report


def _games():
    return [
        Game("S1", "A", "B", "V1", "T1", date(2026, 3, 7), 1, state=GameState.FINISHED),
        Game("S1", "C", "A", "V2", "T1", date(2026, 3, 14), 1),
        Game("S1", "B", "C", "V1", "T2", date(2026, 3, 14), 2),
    ]


class TestComputeStats:
    def test_counts(self):
        stats = compute_stats(_games(), ["C", "B", "A"])
        assert stats["all_teams"] == ["A", "B", "C"]
        assert stats["home_counts"] == {"A": 1, "C": 1, "B": 1}
        assert stats["away_counts"] == {"B": 1, "A": 1, "C": 1}
        assert stats["total_games"]["A"] == 2
        assert stats["played_counts"] == {"A": 1, "B": 1}
        assert stats["matchup_counts"]["A"]["B"] == 1
        assert stats["venue_counts"] == {"V1": 2, "V2": 1}
        assert stats["slot_counts"] == {"T1": 2, "T2": 1}
        assert stats["day_counts"] == {"Sat": 3}
        assert stats["cycles"] == [1, 2]

    def test_dates(self):
        stats = compute_stats(_games(), ["A", "B", "C"])
        assert stats["game_count"] == 3
        assert stats["days_used"] == 2
        assert stats["first_date"] == date(2026, 3, 7)
        assert stats["last_date"] == date(2026, 3, 14)
        assert stats["avg_games_per_day"] == 1.5

    def test_empty(self):
        stats = compute_stats([], ["A"])
        assert stats["first_date"] is None
        assert stats["avg_games_per_day"] == 0.0


class TestFormatStatsReport:
    def test_sections(self):
        report = format_stats_report(compute_stats(_games(), ["A", "B", "C"]))
        for section in ("HOME/VISITOR BALANCE", "MATCHUP MATRIX", "GAMES PER VENUE",
                        "GAMES PER TIME SLOT", "GAMES PER DATE"):
            assert section in report
        assert "Sat 2026-03-14" in report

    def test_flags_imbalance(self):
        games = [Game("S1", "A", t, "V1", "T1", date(2026, 3, d), 1)
                 for t, d in (("B", 7), ("C", 14), ("D", 21))]
        report = format_stats_report(compute_stats(games, ["A", "B", "C", "D"]))
        assert any(line.startswith("A ") and line.endswith("***")
                   for line in report.splitlines())
