"""Data models for the season scheduling engine."""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Optional


class DayOfWeek(Enum):
    Mon = 0
    Tue = 1
    Wed = 2
    Thu = 3
    Fri = 4
    Sat = 5
    Sun = 6

    @classmethod
    def from_str(cls, s: str) -> "DayOfWeek":
        return cls[s[:3].capitalize()]

    @classmethod
    def of(cls, d: date) -> "DayOfWeek":
        return cls(d.weekday())


DEFAULT_WEEKDAYS = frozenset({DayOfWeek.Sat})


class SeasonState(str, Enum):
    """Lifecycle states of a season."""
    CONFIGURATION = "configuration"
    GENERATED = "generated"
    ACTIVE = "active"
    PLAYOFFS = "playoffs"
    CLOSED = "closed"


class GameState(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    SUSPENDED = "suspended"


@dataclass
class Team:
    """A registered team. Only active teams are paired."""
    id: str
    name: str = ""
    active: bool = True


@dataclass
class Venue:
    """A bookable field."""
    id: str
    name: str = ""
    active: bool = True
    display_order: int = 0


@dataclass
class TimeSlot:
    """A named start/end interval offered on every scheduling day."""
    id: str
    name: str = ""
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    active_by_default: bool = True
    display_order: int = 0


@dataclass
class Season:
    """One scheduling universe: window, parameters and lifecycle state."""
    id: str
    league_id: str
    name: str
    start_date: date
    end_date: date
    max_games_per_day: int
    cycles: int = 1
    playoff_start: Optional[date] = None
    auto_regenerate: bool = False
    state: SeasonState = SeasonState.CONFIGURATION
    last_generated_at: Optional[datetime] = None
    allowed_weekdays: frozenset = DEFAULT_WEEKDAYS
    blackout_dates: frozenset = frozenset()
    slot_overrides: dict[str, bool] = field(default_factory=dict)
    # Every Nth scheduling date (0 = off) and explicit dates kept free for
    # makeup games.
    flex_every: int = 0
    flex_dates: frozenset = frozenset()

    def config_errors(self) -> list[str]:
        """Return every broken parameter invariant (empty if valid)."""
        errors = []
        if self.end_date < self.start_date:
            errors.append(
                f"end date {self.end_date} is before start date {self.start_date}"
            )
        if self.playoff_start is not None and self.playoff_start < self.end_date:
            errors.append(
                f"playoff start {self.playoff_start} is before end date {self.end_date}"
            )
        if self.cycles < 1:
            errors.append(f"cycles must be >= 1 (got {self.cycles})")
        if self.max_games_per_day < 1:
            errors.append(
                f"max games per day must be >= 1 (got {self.max_games_per_day})"
            )
        if not self.allowed_weekdays:
            errors.append("no allowed weekdays configured")
        if self.flex_every < 0:
            errors.append(f"flex_every must be >= 0 (got {self.flex_every})")
        return errors

    def slot_usable(self, slot: TimeSlot) -> bool:
        return self.slot_overrides.get(slot.id, slot.active_by_default)

    def is_scheduling_date(self, d: date) -> bool:
        """True if d is inside the window, on an allowed weekday, and not blacked out."""
        return (self.start_date <= d <= self.end_date
                and DayOfWeek.of(d) in self.allowed_weekdays
                and d not in self.blackout_dates)


@dataclass(frozen=True)
class Pairing:
    """An abstract matchup before any day/venue/slot is chosen."""
    home: str
    away: str
    cycle: int
    round_number: int = 0

    def involves(self, team_id: str) -> bool:
        return team_id in (self.home, self.away)

    @property
    def pair_key(self) -> tuple[str, str]:
        return (self.home, self.away) if self.home < self.away else (self.away, self.home)

    def label(self) -> str:
        return f"{self.home} vs {self.away} (cycle {self.cycle})"


@dataclass(frozen=True)
class Resource:
    """A (venue, time slot) combination bookable on a given day."""
    venue_id: str
    slot_id: str


@dataclass
class SchedulingDay:
    """A date in the season window offered as a capacity-bounded resource."""
    date: date
    capacity: int
    resources: list[Resource] = field(default_factory=list)


@dataclass
class Game:
    """A pairing placed on a concrete date, venue and time slot."""
    season_id: str
    home_team: str
    away_team: str
    venue_id: str
    slot_id: str
    date: date
    cycle: int
    round_number: int = 0
    state: GameState = GameState.SCHEDULED

    @property
    def played(self) -> bool:
        return self.state != GameState.SCHEDULED

    @property
    def resource_key(self) -> tuple[date, str, str]:
        return (self.date, self.venue_id, self.slot_id)

    @property
    def pair_key(self) -> tuple[str, str]:
        h, a = self.home_team, self.away_team
        return (h, a) if h < a else (a, h)

    def involves(self, team_id: str) -> bool:
        return team_id in (self.home_team, self.away_team)

    def label(self) -> str:
        return (f"{self.home_team} vs {self.away_team} on {self.date} "
                f"@ {self.venue_id}/{self.slot_id}")


@dataclass
class GenerationRecord:
    """Log entry written after every successful generation run."""
    season_id: str
    generated_at: datetime
    games_created: int
    pinned_games: int = 0
    orphaned_pins: int = 0
    days_used: int = 0
    warnings: list[str] = field(default_factory=list)
