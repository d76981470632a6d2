"""Persistence collaborator interface for the season scheduler.

The engine only reads season parameters, rosters, venues, slots and played
games, and writes back a full replacement of a season's unplayed games. How
those are stored is up to the surrounding system; ``InMemoryStore`` is the
reference implementation used by the CLI and tests.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import replace

from seasonsched.models import Game, GenerationRecord, Season, Team, TimeSlot, Venue

logger = logging.getLogger(__name__)


class ScheduleStore(ABC):

    @abstractmethod
    def get_season(self, season_id: str) -> Season:
        """Return a detached copy of the season; raise KeyError if unknown."""

    @abstractmethod
    def save_season(self, season: Season) -> None:
        ...

    @abstractmethod
    def teams(self, league_id: str) -> list[Team]:
        ...

    @abstractmethod
    def venues(self, league_id: str) -> list[Venue]:
        ...

    @abstractmethod
    def time_slots(self, league_id: str) -> list[TimeSlot]:
        ...

    @abstractmethod
    def games(self, season_id: str) -> list[Game]:
        ...

    @abstractmethod
    def replace_unplayed_games(self, season_id: str, games: list[Game]) -> None:
        """Atomically swap every ``scheduled`` game of the season for ``games``.

        Played games are left exactly as they are.
        """

    @abstractmethod
    def add_generation_record(self, record: GenerationRecord) -> None:
        ...

    def active_teams(self, league_id: str) -> list[Team]:
        return [t for t in self.teams(league_id) if t.active]

    def active_venues(self, league_id: str) -> list[Venue]:
        return [v for v in self.venues(league_id) if v.active]

    def played_games(self, season_id: str) -> list[Game]:
        return [g for g in self.games(season_id) if g.played]


class InMemoryStore(ScheduleStore):
    """Dict-backed store. Reads return copies so callers never mutate state."""

    def __init__(self):
        self._lock = threading.Lock()
        self._seasons: dict[str, Season] = {}
        self._teams: dict[str, list[Team]] = {}
        self._venues: dict[str, list[Venue]] = {}
        self._slots: dict[str, list[TimeSlot]] = {}
        self._games: dict[str, list[Game]] = {}
        self.generation_log: list[GenerationRecord] = []

    def add_season(self, season: Season) -> None:
        self._seasons[season.id] = replace(season)
        self._games.setdefault(season.id, [])

    def set_teams(self, league_id: str, teams: list[Team]) -> None:
        self._teams[league_id] = [replace(t) for t in teams]

    def set_venues(self, league_id: str, venues: list[Venue]) -> None:
        self._venues[league_id] = [replace(v) for v in venues]

    def set_time_slots(self, league_id: str, slots: list[TimeSlot]) -> None:
        self._slots[league_id] = [replace(s) for s in slots]

    def set_games(self, season_id: str, games: list[Game]) -> None:
        self._games[season_id] = [replace(g) for g in games]

    def update_game(self, season_id: str, index: int, **changes) -> Game:
        """Mutate one stored game, the way the live-scoring side would."""
        with self._lock:
            game = replace(self._games[season_id][index], **changes)
            self._games[season_id][index] = game
            return replace(game)

    def get_season(self, season_id: str) -> Season:
        season = self._seasons[season_id]
        return replace(season, slot_overrides=dict(season.slot_overrides))

    def save_season(self, season: Season) -> None:
        self._seasons[season.id] = replace(season)

    def teams(self, league_id: str) -> list[Team]:
        return [replace(t) for t in self._teams.get(league_id, [])]

    def venues(self, league_id: str) -> list[Venue]:
        return [replace(v) for v in self._venues.get(league_id, [])]

    def time_slots(self, league_id: str) -> list[TimeSlot]:
        return [replace(s) for s in self._slots.get(league_id, [])]

    def games(self, season_id: str) -> list[Game]:
        return [replace(g) for g in self._games.get(season_id, [])]

    def replace_unplayed_games(self, season_id: str, games: list[Game]) -> None:
        with self._lock:
            kept = [g for g in self._games.get(season_id, []) if g.played]
            self._games[season_id] = kept + [replace(g) for g in games]
        logger.debug("Season %s: stored %d new games beside %d played",
                     season_id, len(games), len(kept))

    def add_generation_record(self, record: GenerationRecord) -> None:
        self.generation_log.append(record)
