"""Tests for store.py — the in-memory persistence collaborator."""

from datetime import date

from seasonsched.models import Game, GameState, Season, Team
from seasonsched.store import InMemoryStore


def _make_store():
    store = InMemoryStore()
    store.add_season(Season("S1", "L1", "Test", date(2026, 3, 7), date(2026, 6, 27), 2))
    store.set_teams("L1", [Team("A"), Team("B"), Team("C", active=False)])
    return store


def _game(home, away, d, state=GameState.SCHEDULED):
    return Game("S1", home, away, "V1", "T1", d, 1, state=state)


class TestInMemoryStore:
    def test_reads_are_copies(self):
        store = _make_store()
        season = store.get_season("S1")
        season.cycles = 9
        season.slot_overrides["T1"] = False
        again = store.get_season("S1")
        assert again.cycles == 1
        assert again.slot_overrides == {}

        teams = store.teams("L1")
        teams[0].active = False
        assert store.teams("L1")[0].active

    def test_active_teams(self):
        assert [t.id for t in _make_store().active_teams("L1")] == ["A", "B"]

    def test_unknown_league_is_empty(self):
        store = _make_store()
        assert store.teams("other") == []
        assert store.venues("L1") == []

    def test_replace_keeps_played_games(self):
        store = _make_store()
        store.set_games("S1", [
            _game("A", "B", date(2026, 3, 7), GameState.FINISHED),
            _game("B", "A", date(2026, 3, 14)),
        ])
        store.replace_unplayed_games("S1", [_game("B", "A", date(2026, 3, 21))])

        games = store.games("S1")
        assert [(g.date, g.state) for g in games] == [
            (date(2026, 3, 7), GameState.FINISHED),
            (date(2026, 3, 21), GameState.SCHEDULED),
        ]
        assert store.played_games("S1") == games[:1]

    def test_update_game(self):
        store = _make_store()
        store.set_games("S1", [_game("A", "B", date(2026, 3, 7))])
        updated = store.update_game("S1", 0, state=GameState.IN_PROGRESS)
        assert updated.played
        assert store.games("S1")[0].state == GameState.IN_PROGRESS
