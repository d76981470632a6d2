"""Season lifecycle controller.

Season lifecycle states:
    configuration -> generated -> active -> closed
                                      \\-> playoffs -> closed

Generation (and regeneration) runs under a per-season lock that fails fast
instead of queueing. A run either stores a complete, validated schedule or
writes nothing at all.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from seasonsched.errors import (
    GenerationInProgress, InsufficientTeams, InvalidTransition, NoResources,
    SeasonConfigError,
)
from seasonsched.models import GenerationRecord, Season, SeasonState
from seasonsched.scheduler import ScheduleResult, schedule
from seasonsched.store import ScheduleStore

logger = logging.getLogger(__name__)

# Key = current state, value = states reachable from it.
# generated -> generated is a manual re-run before the season starts.
ALLOWED_TRANSITIONS: dict[SeasonState, set[SeasonState]] = {
    SeasonState.CONFIGURATION: {SeasonState.GENERATED},
    SeasonState.GENERATED: {SeasonState.GENERATED, SeasonState.ACTIVE},
    SeasonState.ACTIVE: {SeasonState.PLAYOFFS, SeasonState.CLOSED},
    SeasonState.PLAYOFFS: {SeasonState.CLOSED},
    SeasonState.CLOSED: set(),
}

REGENERABLE_STATES = frozenset({SeasonState.GENERATED, SeasonState.ACTIVE})

# Fields a parameter change may touch; anything else is rejected.
PARAMETER_FIELDS = frozenset({
    "name", "start_date", "end_date", "playoff_start", "max_games_per_day",
    "cycles", "auto_regenerate", "allowed_weekdays", "blackout_dates",
    "slot_overrides", "flex_every", "flex_dates",
})


def transition(season: Season, target: SeasonState, reason: str = "") -> Season:
    """Move a season to ``target`` or raise InvalidTransition."""
    current = season.state
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransition(current, target, reason)
    season.state = target
    if current != target:
        logger.info("Season %s: %s -> %s", season.id, current.value, target.value)
    return season


def _generate_guard(season: Season) -> None:
    if SeasonState.GENERATED not in ALLOWED_TRANSITIONS[season.state]:
        raise InvalidTransition(season.state, SeasonState.GENERATED,
                                "use regenerate() once the season is running")


def _regenerate_guard(season: Season) -> None:
    if season.state not in REGENERABLE_STATES:
        raise InvalidTransition(season.state, season.state,
                                "regeneration needs a generated or active season")


class GenerationLocks:
    """One non-blocking lock per season id."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, season_id: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(season_id, threading.Lock())

    def is_locked(self, season_id: str) -> bool:
        return self._lock_for(season_id).locked()

    @contextmanager
    def hold(self, season_id: str):
        lock = self._lock_for(season_id)
        if not lock.acquire(blocking=False):
            raise GenerationInProgress(season_id)
        try:
            yield
        finally:
            lock.release()


# Shared by every controller that is not handed its own registry, so two
# controllers for one season contend for the same lock.
DEFAULT_LOCKS = GenerationLocks()


class SeasonController:
    """Drives one season through its lifecycle against a ScheduleStore.

    ``clock`` returns the current datetime; it is injectable so date guards
    (season start, playoff start) can be exercised deterministically.

    Every write to the season record happens under the season's generation
    lock, so a parameter edit or a manual transition never interleaves with a
    generation run; it fails fast with GenerationInProgress instead.
    """

    def __init__(self, store: ScheduleStore, season_id: str,
                 locks: Optional[GenerationLocks] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.season_id = season_id
        self.locks = locks if locks is not None else DEFAULT_LOCKS
        self.clock = clock

    @property
    def season(self) -> Season:
        return self.store.get_season(self.season_id)

    # -- generation -------------------------------------------------------

    def generate(self) -> ScheduleResult:
        """configuration|generated -> generated: build and store a schedule."""
        return self._run(_generate_guard)

    def regenerate(self) -> ScheduleResult:
        """Re-run generation for a generated or active season.

        Played games are pinned; an active season keeps its state and new
        games are only placed from today onward.
        """
        return self._run(_regenerate_guard)

    def _run(self, guard: Callable[[Season], None]) -> ScheduleResult:
        with self.locks.hold(self.season_id):
            # Read and check under the lock so a finished concurrent run or
            # transition is seen.
            season = self.season
            guard(season)
            teams = self.store.active_teams(season.league_id)
            if len(teams) < 2:
                raise InsufficientTeams(len(teams))
            venues = self.store.active_venues(season.league_id)
            slots = [s for s in self.store.time_slots(season.league_id)
                     if season.slot_usable(s)]
            if not venues or not slots:
                raise NoResources(
                    f"Season {season.id} needs at least one active venue and "
                    f"one usable time slot (have {len(venues)} venue(s), "
                    f"{len(slots)} slot(s))"
                )

            now = self.clock()
            pinned = self.store.played_games(season.id)
            not_before = now.date() if season.state == SeasonState.ACTIVE else None

            result = schedule(season, teams, venues, slots,
                              pinned=pinned, not_before=not_before)

            self.store.replace_unplayed_games(season.id, result.games)
            if season.state != SeasonState.ACTIVE:
                transition(season, SeasonState.GENERATED)
            season.last_generated_at = now
            self.store.save_season(season)
            self.store.add_generation_record(GenerationRecord(
                season_id=season.id,
                generated_at=now,
                games_created=len(result.games),
                pinned_games=len(pinned),
                orphaned_pins=len(result.orphaned),
                days_used=result.days_used,
                warnings=list(result.validation["warnings"]),
            ))
            logger.info("Season %s: stored %d games (%d pinned kept)",
                        season.id, len(result.games), len(pinned))
            return result

    # -- triggers ---------------------------------------------------------

    def on_roster_change(self) -> Optional[ScheduleResult]:
        """React to a team being added, removed, activated or deactivated."""
        return self._auto_regenerate("roster change")

    def on_parameter_change(self, **changes) -> Optional[ScheduleResult]:
        """Apply new season parameters, then regenerate if auto-regenerate is on.

        Invalid parameters raise SeasonConfigError and nothing is saved.
        """
        unknown = set(changes) - PARAMETER_FIELDS
        if unknown:
            raise SeasonConfigError(
                [f"unknown season parameter '{name}'" for name in sorted(unknown)]
            )
        with self.locks.hold(self.season_id):
            season = replace(self.season, **changes)
            errors = season.config_errors()
            if errors:
                raise SeasonConfigError(errors)
            self.store.save_season(season)
        return self._auto_regenerate("parameter change")

    def _auto_regenerate(self, why: str) -> Optional[ScheduleResult]:
        season = self.season
        if not season.auto_regenerate:
            logger.debug("Season %s: %s ignored, auto-regenerate is off",
                         season.id, why)
            return None
        if season.state not in REGENERABLE_STATES:
            logger.debug("Season %s: %s ignored in state %s",
                         season.id, why, season.state.value)
            return None
        logger.info("Season %s: regenerating after %s", season.id, why)
        return self._run(_regenerate_guard)

    # -- manual transitions -----------------------------------------------

    def activate(self, force: bool = False) -> Season:
        """generated -> active, once the start date has arrived (or forced)."""
        with self.locks.hold(self.season_id):
            season = self.season
            today = self.clock().date()
            if (season.state == SeasonState.GENERATED and not force
                    and today < season.start_date):
                raise InvalidTransition(season.state, SeasonState.ACTIVE,
                                        f"season starts on {season.start_date}")
            transition(season, SeasonState.ACTIVE)
            self.store.save_season(season)
            return season

    def enter_playoffs(self) -> Season:
        """active -> playoffs, on or after the playoff start date."""
        with self.locks.hold(self.season_id):
            season = self.season
            today = self.clock().date()
            if season.state == SeasonState.ACTIVE:
                if season.playoff_start is None:
                    raise InvalidTransition(season.state, SeasonState.PLAYOFFS,
                                            "season has no playoff start date")
                if today < season.playoff_start:
                    raise InvalidTransition(season.state, SeasonState.PLAYOFFS,
                                            f"playoffs start on {season.playoff_start}")
            transition(season, SeasonState.PLAYOFFS)
            self.store.save_season(season)
            return season

    def close(self) -> Season:
        """active|playoffs -> closed. Terminal."""
        with self.locks.hold(self.season_id):
            season = self.season
            transition(season, SeasonState.CLOSED)
            self.store.save_season(season)
            return season
