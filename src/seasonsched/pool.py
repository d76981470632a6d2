"""Calendar resource pool: scheduling days and their venue/slot resources."""

from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Iterator

from seasonsched.models import Game, Resource, SchedulingDay, Season, TimeSlot, Venue


def canonical_resources(season: Season, venues: list[Venue],
                        slots: list[TimeSlot]) -> list[Resource]:
    """All usable (venue, slot) pairs in canonical order.

    Venues by display order then slots by display order, ties broken by id.
    """
    usable_venues = sorted((v for v in venues if v.active),
                           key=lambda v: (v.display_order, v.id))
    usable_slots = sorted((s for s in slots if season.slot_usable(s)),
                          key=lambda s: (s.display_order, s.id))
    return [Resource(v.id, s.id) for v in usable_venues for s in usable_slots]


def scheduling_dates(season: Season) -> Iterator[date]:
    """Every date in the season window that can host games, in order."""
    current = season.start_date
    while current <= season.end_date:
        if season.is_scheduling_date(current):
            yield current
        current += timedelta(days=1)


def makeup_dates(season: Season) -> frozenset:
    """Scheduling dates held back for makeup games.

    Every ``flex_every``-th scheduling date (counting from 1) plus any date
    listed in ``flex_dates``. Blackouts are not counted.
    """
    held = set()
    for n, d in enumerate(scheduling_dates(season), start=1):
        if d in season.flex_dates or (season.flex_every and n % season.flex_every == 0):
            held.add(d)
    return frozenset(held)


class ResourcePool:
    """Restartable, read-only view over a season's scheduling days.

    Each iteration re-derives the days from the season window, so the pool
    never carries state between generation runs. Pinned games consume both
    their (venue, slot) on their date and one unit of that day's capacity.
    Days before ``not_before`` and makeup days are never offered.
    """

    def __init__(self, season: Season, venues: list[Venue],
                 slots: list[TimeSlot], pinned: Iterable[Game] = (),
                 not_before: date | None = None):
        self.season = season
        self.not_before = not_before
        self.resources = canonical_resources(season, venues, slots)
        self.makeup = makeup_dates(season)
        self._pinned_by_date: dict[date, set[Resource]] = defaultdict(set)
        for g in pinned:
            self._pinned_by_date[g.date].add(Resource(g.venue_id, g.slot_id))

    def __iter__(self) -> Iterator[SchedulingDay]:
        cap = self.season.max_games_per_day
        for d in scheduling_dates(self.season):
            if self.not_before is not None and d < self.not_before:
                continue
            if d in self.makeup:
                continue
            taken = self._pinned_by_date.get(d, set())
            # Truncate before removing pinned resources so the combinations
            # past the cap are never offered, pinned or not.
            offered = [r for r in self.resources[:cap] if r not in taken]
            capacity = max(0, min(cap - len(taken), len(offered)))
            yield SchedulingDay(date=d, capacity=capacity,
                                resources=offered[:capacity])

    @property
    def per_day_capacity(self) -> int:
        return min(self.season.max_games_per_day, len(self.resources))

    def total_capacity(self) -> int:
        return sum(day.capacity for day in self)
