"""Tests for models.py — data classes and enums."""

from datetime import date, time
from seasonsched.models import (
    DayOfWeek, Game, GameState, Pairing, Season, SeasonState, TimeSlot,
)


def _make_season(**kwargs):
    defaults = dict(
        id="S1", league_id="L1", name="Test",
        start_date=date(2026, 3, 7), end_date=date(2026, 6, 27),
        max_games_per_day=4,
    )
    defaults.update(kwargs)
    return Season(**defaults)


class TestDayOfWeek:
    def test_from_str_full(self):
        assert DayOfWeek.from_str("Monday") == DayOfWeek.Mon
        assert DayOfWeek.from_str("Saturday") == DayOfWeek.Sat

    def test_from_str_short(self):
        assert DayOfWeek.from_str("Thu") == DayOfWeek.Thu
        assert DayOfWeek.from_str("Sun") == DayOfWeek.Sun

    def test_from_str_case_insensitive(self):
        assert DayOfWeek.from_str("tue") == DayOfWeek.Tue
        assert DayOfWeek.from_str("FRI") == DayOfWeek.Fri

    def test_of_date(self):
        # 2026-03-07 is a Saturday
        assert DayOfWeek.of(date(2026, 3, 7)) == DayOfWeek.Sat
        assert DayOfWeek.of(date(2026, 3, 9)) == DayOfWeek.Mon


class TestSeason:
    def test_defaults(self):
        season = _make_season()
        assert season.state == SeasonState.CONFIGURATION
        assert season.cycles == 1
        assert season.allowed_weekdays == frozenset({DayOfWeek.Sat})
        assert season.last_generated_at is None
        assert season.config_errors() == []

    def test_end_before_start(self):
        season = _make_season(end_date=date(2026, 3, 1))
        errors = season.config_errors()
        assert len(errors) == 1
        assert "before start date" in errors[0]

    def test_playoff_before_end(self):
        season = _make_season(playoff_start=date(2026, 6, 1))
        assert any("playoff" in e for e in season.config_errors())

    def test_playoff_on_end_date_is_fine(self):
        season = _make_season(playoff_start=date(2026, 6, 27))
        assert season.config_errors() == []

    def test_zero_cycles(self):
        assert any("cycles" in e for e in _make_season(cycles=0).config_errors())

    def test_zero_capacity(self):
        errors = _make_season(max_games_per_day=0).config_errors()
        assert any("max games per day" in e for e in errors)

    def test_flex_off_by_default(self):
        season = _make_season()
        assert season.flex_every == 0
        assert season.flex_dates == frozenset()
        assert any("flex_every" in e for e in _make_season(flex_every=-2).config_errors())

    def test_slot_usable_override(self):
        season = _make_season(slot_overrides={"T1": False, "T3": True})
        t1 = TimeSlot("T1", active_by_default=True)
        t2 = TimeSlot("T2", active_by_default=True)
        t3 = TimeSlot("T3", active_by_default=False)
        assert not season.slot_usable(t1)
        assert season.slot_usable(t2)
        assert season.slot_usable(t3)

    def test_is_scheduling_date(self):
        season = _make_season(blackout_dates=frozenset({date(2026, 4, 4)}))
        assert season.is_scheduling_date(date(2026, 3, 7))       # Saturday
        assert not season.is_scheduling_date(date(2026, 3, 8))   # Sunday
        assert not season.is_scheduling_date(date(2026, 4, 4))   # blackout
        assert not season.is_scheduling_date(date(2026, 2, 28))  # before window
        assert not season.is_scheduling_date(date(2026, 7, 4))   # after window


class TestPairing:
    def test_pair_key_is_sorted(self):
        assert Pairing("B", "A", 1).pair_key == ("A", "B")
        assert Pairing("A", "B", 2).pair_key == ("A", "B")

    def test_involves(self):
        p = Pairing("A", "B", 1)
        assert p.involves("A")
        assert p.involves("B")
        assert not p.involves("C")

    def test_label(self):
        assert Pairing("A", "B", 2).label() == "A vs B (cycle 2)"


class TestGame:
    def _game(self, **kwargs):
        defaults = dict(season_id="S1", home_team="A", away_team="B",
                        venue_id="V1", slot_id="T1", date=date(2026, 3, 7), cycle=1)
        defaults.update(kwargs)
        return Game(**defaults)

    def test_scheduled_is_not_played(self):
        assert not self._game().played

    def test_other_states_are_played(self):
        for state in (GameState.IN_PROGRESS, GameState.FINISHED, GameState.SUSPENDED):
            assert self._game(state=state).played

    def test_keys(self):
        g = self._game(home_team="Z", away_team="M")
        assert g.resource_key == (date(2026, 3, 7), "V1", "T1")
        assert g.pair_key == ("M", "Z")

    def test_time_slot_fields(self):
        slot = TimeSlot("T1", "Morning", time(9, 0), time(11, 30), True, 1)
        assert slot.start_time < slot.end_time
