"""Main scheduling engine for the season scheduler.

Three phases:
1. Generate round-robin pairings (roundrobin.py)
2. Slot assignment: place each pairing on the earliest feasible
   day/venue/slot, with a single-level backtrack when first-fit fails
3. Validation: re-check every structural rule (constraints.py)

Core principle: the output depends only on the input snapshot. Pairings are
processed in generation order, days chronologically and resources in
canonical (venue, slot) display order, so an unchanged roster always
produces the same schedule. Nothing is written until every pairing has a
place.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date

from seasonsched.constraints import assert_valid
from seasonsched.errors import NoResources, ResourceShortage, SeasonConfigError
from seasonsched.models import Game, Pairing, Resource, SchedulingDay, Season, Team, TimeSlot, Venue
from seasonsched.output import sort_games
from seasonsched.pool import ResourcePool
from seasonsched.roundrobin import generate_pairings

logger = logging.getLogger(__name__)

CAPACITY_EXHAUSTED = "capacity_exhausted"
TEAM_CONFLICT = "team_conflict"
NO_SCHEDULING_DAYS = "no_scheduling_days"

_REASON_TEXT = {
    CAPACITY_EXHAUSTED: "day capacity exhausted through season end",
    TEAM_CONFLICT: "no common free day for these two teams",
    NO_SCHEDULING_DAYS: "no scheduling days in the season window",
}


@dataclass(frozen=True)
class Unassigned:
    """A pairing the resolver could not place, and why."""
    pairing: Pairing
    reason: str

    def describe(self) -> str:
        return _REASON_TEXT.get(self.reason, self.reason)


@dataclass
class Resolution:
    """Resolver output. ``games`` is in pairing order."""
    games: list[Game]
    unassigned: list[Unassigned] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.unassigned


@dataclass
class ScheduleResult:
    """Full pipeline output: new games plus the pinned games they sit beside."""
    games: list[Game]
    pinned: list[Game]
    orphaned: list[Game]
    pairings: list[Pairing]
    validation: dict
    slot_order: dict[str, int] = field(default_factory=dict)
    venue_order: dict[str, int] = field(default_factory=dict)

    @property
    def all_games(self) -> list[Game]:
        """Pinned and new games in display order, as they are written out."""
        return sort_games(self.pinned + self.games, self.slot_order, self.venue_order)

    @property
    def days_used(self) -> int:
        return len({g.date for g in self.games})


class _WorkingSet:
    """In-memory assignment state for one resolver run."""

    def __init__(self, season_id: str, days: list[SchedulingDay],
                 pinned: list[Game]):
        self.season_id = season_id
        self.days = days
        self.used: dict[date, dict[Resource, int]] = defaultdict(dict)
        self.team_dates: dict[str, set[date]] = defaultdict(set)
        self.placed: dict[int, Game] = {}
        self.pairings: dict[int, Pairing] = {}
        self.pinned_team_dates: set[tuple[str, date]] = set()
        for g in pinned:
            for t in (g.home_team, g.away_team):
                self.team_dates[t].add(g.date)
                self.pinned_team_dates.add((t, g.date))

    def first_fit(self, p: Pairing, skip_date: date | None = None):
        for day in self.days:
            if day.date == skip_date:
                continue
            spot = self.fit_on_day(p, day)
            if spot is not None:
                return spot
        return None

    def fit_on_day(self, p: Pairing, day: SchedulingDay):
        used = self.used[day.date]
        if len(used) >= day.capacity:
            return None
        if day.date in self.team_dates[p.home] or day.date in self.team_dates[p.away]:
            return None
        for r in day.resources:
            if r not in used:
                return day, r
        return None

    def place(self, idx: int, p: Pairing, day: SchedulingDay, r: Resource) -> Game:
        game = Game(
            season_id=self.season_id,
            home_team=p.home,
            away_team=p.away,
            venue_id=r.venue_id,
            slot_id=r.slot_id,
            date=day.date,
            cycle=p.cycle,
            round_number=p.round_number,
        )
        self.used[day.date][r] = idx
        self.team_dates[p.home].add(day.date)
        self.team_dates[p.away].add(day.date)
        self.placed[idx] = game
        self.pairings[idx] = p
        return game

    def unplace(self, idx: int) -> Game:
        game = self.placed.pop(idx)
        del self.used[game.date][Resource(game.venue_id, game.slot_id)]
        self.team_dates[game.home_team].discard(game.date)
        self.team_dates[game.away_team].discard(game.date)
        return game

    def blockers(self, p: Pairing, day: SchedulingDay) -> list[int] | None:
        """Indexes of assigned games that keep p off this day.

        None means the day is blocked by something the resolver may not move
        (a pinned game for one of the teams, or two separate team conflicts).
        """
        if ((p.home, day.date) in self.pinned_team_dates
                or (p.away, day.date) in self.pinned_team_dates):
            return None
        on_day = sorted(self.used[day.date].items(),
                        key=lambda item: day.resources.index(item[0]))
        conflicts = [idx for _, idx in on_day
                     if self.placed[idx].involves(p.home)
                     or self.placed[idx].involves(p.away)]
        if len(conflicts) > 1:
            return None
        if conflicts:
            return conflicts
        if len(on_day) >= day.capacity:
            return [idx for _, idx in on_day]
        return None

    def free_capacity_left(self) -> bool:
        return any(len(self.used[d.date]) < d.capacity for d in self.days)


def _backtrack(ws: _WorkingSet, idx: int, p: Pairing) -> Game | None:
    """Try to make room for p by moving one already-placed game.

    Days are tried in chronological order; on each day the candidate games
    are tried in canonical resource order. The first relocation that lets
    both games fit is committed.
    """
    for day in ws.days:
        candidates = ws.blockers(p, day)
        if not candidates:
            continue
        for other in candidates:
            moved_pairing = ws.pairings[other]
            original = ws.unplace(other)
            spot = ws.first_fit(moved_pairing, skip_date=day.date)
            target = ws.fit_on_day(p, day) if spot is not None else None
            if spot is None or target is None:
                ws.place(other, moved_pairing, day,
                         Resource(original.venue_id, original.slot_id))
                continue
            ws.place(other, moved_pairing, *spot)
            game = ws.place(idx, p, *target)
            logger.debug("Moved %s to %s to make room for %s",
                         moved_pairing.label(), spot[0].date, p.label())
            return game
    return None


def resolve(pairings: list[Pairing], pool: ResourcePool,
            pinned: list[Game] = (), season_id: str | None = None) -> Resolution:
    """Assign every pairing to a (date, venue, slot), earliest first.

    Unplaceable pairings do not stop the run; they are collected with the
    shortage that blocked them so the caller can report all of them at once.
    """
    days = list(pool)
    sid = season_id if season_id is not None else pool.season.id
    ws = _WorkingSet(sid, days, list(pinned))
    unassigned: list[Unassigned] = []

    for idx, p in enumerate(pairings):
        spot = ws.first_fit(p)
        if spot is not None:
            ws.place(idx, p, *spot)
            continue
        if _backtrack(ws, idx, p) is not None:
            continue

        if not days:
            reason = NO_SCHEDULING_DAYS
        elif ws.free_capacity_left():
            reason = TEAM_CONFLICT
        else:
            reason = CAPACITY_EXHAUSTED
        unassigned.append(Unassigned(p, reason))
        logger.debug("Unassignable: %s (%s)", p.label(), reason)

    games = [ws.placed[i] for i in sorted(ws.placed)]
    return Resolution(games=games, unassigned=unassigned)


def match_pinned(pairings: list[Pairing], pinned: list[Game]
                 ) -> tuple[list[Pairing], list[Game]]:
    """Remove the pairings already covered by pinned games.

    A pinned game covers the pairing with the same teams and cycle, matched
    on exact home/away first and then on the reversed orientation. Pinned
    games with no counterpart (a deactivated team, a reduced cycle count)
    are returned as orphans; they stay on the calendar untouched.
    """
    remaining = list(pairings)
    orphaned = []
    for g in sorted(pinned, key=lambda g: (g.date, g.slot_id, g.venue_id)):
        exact = next((i for i, p in enumerate(remaining)
                      if p.cycle == g.cycle and p.home == g.home_team
                      and p.away == g.away_team), None)
        if exact is None:
            exact = next((i for i, p in enumerate(remaining)
                          if p.cycle == g.cycle and p.pair_key == g.pair_key), None)
        if exact is None:
            orphaned.append(g)
        else:
            remaining.pop(exact)
    return remaining, orphaned


def schedule(season: Season, teams: list[Team], venues: list[Venue],
             slots: list[TimeSlot], pinned: list[Game] = (),
             not_before: date | None = None) -> ScheduleResult:
    """Run pairing, slot assignment and validation for one season.

    ``pinned`` are already-played games: they keep their date, venue and slot
    and are never moved. ``not_before`` keeps new games off dates that have
    already passed when a running season is regenerated.

    Raises InsufficientTeams / InvalidCycleCount / NoResources /
    ResourceShortage for operator-fixable problems, and
    ScheduleInvariantViolation if the result breaks a structural rule.
    """
    errors = season.config_errors()
    if errors:
        raise SeasonConfigError(errors)

    team_ids = sorted(t.id for t in teams if t.active)
    pinned = [g for g in pinned if g.season_id == season.id]
    pairings = generate_pairings(team_ids, season.cycles)

    pool = ResourcePool(season, venues, slots, pinned=pinned,
                        not_before=not_before)
    if not pool.resources:
        raise NoResources(
            f"Season {season.id} has no active venue or no usable time slot"
        )

    remaining, orphaned = match_pinned(pairings, pinned)
    for g in orphaned:
        logger.warning("Pinned game %s has no matching pairing; keeping it as-is",
                       g.label())

    logger.info("Scheduling season %s: %d teams, %d cycle(s), %d pairings "
                "(%d pinned), %d resources/day",
                season.id, len(team_ids), season.cycles, len(pairings),
                len(pairings) - len(remaining), pool.per_day_capacity)

    resolution = resolve(remaining, pool, pinned, season_id=season.id)
    if resolution.unassigned:
        logger.info("Season %s: %d pairing(s) unassignable",
                    season.id, len(resolution.unassigned))
        raise ResourceShortage(resolution.unassigned)

    validation = assert_valid(pinned + resolution.games, season, team_ids)
    logger.info("Season %s: %d games placed on %d day(s)",
                season.id, len(resolution.games),
                len({g.date for g in resolution.games}))

    return ScheduleResult(
        games=resolution.games,
        pinned=pinned,
        orphaned=orphaned,
        pairings=pairings,
        validation=validation,
        slot_order={s.id: s.display_order for s in slots},
        venue_order={v.id: v.display_order for v in venues},
    )
