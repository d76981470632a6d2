"""Exceptions raised by the scheduling engine."""


class SchedulingError(Exception):
    """Base class for all engine errors."""


class SeasonConfigError(SchedulingError):
    """Season parameters or a season file are invalid."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Invalid season configuration: " + "; ".join(self.errors))


class InsufficientTeams(SchedulingError):
    def __init__(self, count: int):
        self.count = count
        super().__init__(f"At least 2 active teams are required (got {count})")


class InvalidCycleCount(SchedulingError):
    def __init__(self, cycles: int):
        self.cycles = cycles
        super().__init__(f"Cycle count must be at least 1 (got {cycles})")


class NoResources(SchedulingError):
    """The season has no active venue or no usable time slot."""


class ResourceShortage(SchedulingError):
    """Some pairings could not be placed anywhere in the season window.

    ``unassigned`` is the full list of :class:`seasonsched.scheduler.Unassigned`
    entries, in pairing order.
    """

    def __init__(self, unassigned: list):
        self.unassigned = list(unassigned)
        lines = [f"{len(self.unassigned)} pairing(s) could not be scheduled:"]
        for u in self.unassigned:
            lines.append(f"  {u.pairing.label()}: {u.describe()}")
        super().__init__("\n".join(lines))


class ScheduleInvariantViolation(SchedulingError):
    """A generated schedule broke a structural rule. Always a defect."""

    def __init__(self, rule: str, games: list, errors: list[str] | None = None):
        self.rule = rule
        self.games = list(games)
        self.errors = list(errors or [])
        detail = self.errors[0] if self.errors else rule
        super().__init__(
            f"Schedule invariant '{rule}' violated: {detail} "
            f"({len(self.errors)} error(s), {len(self.games)} game(s) involved)"
        )


class GenerationInProgress(SchedulingError):
    def __init__(self, season_id: str):
        self.season_id = season_id
        super().__init__(
            f"Schedule generation already running for season {season_id}; retry later"
        )


class InvalidTransition(SchedulingError):
    def __init__(self, current, target, reason: str = ""):
        self.current = current
        self.target = target
        msg = f"Invalid season transition: {current.value} -> {target.value}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)
