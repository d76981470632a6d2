"""Constraint validation for generated season schedules.

Can validate either an in-memory game list or a re-imported CSV. Every rule
is re-derived from the games themselves; nothing is trusted from the
resolver that produced them.
"""

from collections import defaultdict

from seasonsched.errors import ScheduleInvariantViolation
from seasonsched.models import DayOfWeek, Game, Season
from seasonsched.pool import makeup_dates
from seasonsched.roundrobin import generate_pairings

COVERAGE = "coverage"
RESOURCE_CONFLICT = "resource_conflict"
TEAM_DATE_CONFLICT = "team_date_conflict"
CALENDAR = "calendar"
HOME_AWAY_BALANCE = "home_away_balance"

RULES = [COVERAGE, RESOURCE_CONFLICT, TEAM_DATE_CONFLICT, CALENDAR, HOME_AWAY_BALANCE]


class _Violations:
    def __init__(self):
        self.errors: dict[str, list[str]] = defaultdict(list)
        self.games: dict[str, list[Game]] = defaultdict(list)

    def add(self, rule: str, message: str, *games: Game):
        self.errors[rule].append(message)
        for g in games:
            if not any(g is seen for seen in self.games[rule]):
                self.games[rule].append(g)


def validate_schedule(games: list[Game], season: Season,
                      team_ids: list[str]) -> dict:
    """Validate a full season schedule against all structural rules.

    Games that are no longer in the ``scheduled`` state are treated as pinned:
    they are facts on the calendar and are exempt from the calendar rule. A
    pinned game whose teams or cycle no longer belong to the current roster
    is orphaned and skipped by the coverage and balance rules. A pinned game
    whose home/away roles are the reverse of today's pairing is reported as a
    warning and widens that team's balance tolerance by one.

    Returns dict with:
    - valid: bool (True if no rule is broken)
    - errors: list of all violation messages
    - warnings: list of soft issues
    - violations: rule -> {"errors": [...], "games": [...]}
    """
    v = _Violations()
    warnings = []
    roster = set(team_ids)
    cycles = season.cycles

    expected_home: dict[tuple[tuple[str, str], int], str] = {}
    if len(team_ids) >= 2 and cycles >= 1:
        for p in generate_pairings(sorted(team_ids), cycles):
            expected_home[(p.pair_key, p.cycle)] = p.home

    def _orphaned(g: Game) -> bool:
        return g.played and (g.home_team not in roster
                             or g.away_team not in roster
                             or not 1 <= g.cycle <= cycles)

    # (a) pairing coverage and home/away orientation
    seen: dict[tuple[tuple[str, str], int], Game] = {}
    extra_tolerance: dict[str, int] = defaultdict(int)
    counted: list[Game] = []
    for g in games:
        if g.home_team == g.away_team:
            v.add(COVERAGE, f"{g.label()}: team plays itself", g)
            continue
        if _orphaned(g):
            warnings.append(f"Orphaned pinned game {g.label()} ignored for coverage")
            continue
        key = (g.pair_key, g.cycle)
        if key not in expected_home:
            v.add(COVERAGE, f"{g.label()}: not an expected pairing "
                            f"for cycle {g.cycle}", g)
            continue
        if key in seen:
            v.add(COVERAGE, f"{g.pair_key[0]} vs {g.pair_key[1]}: met more "
                            f"than once in cycle {g.cycle}", seen[key], g)
            continue
        seen[key] = g
        counted.append(g)
        if g.home_team != expected_home[key]:
            if g.played:
                warnings.append(f"Pinned game {g.label()} has reversed home/away roles")
                extra_tolerance[g.home_team] += 1
                extra_tolerance[g.away_team] += 1
            else:
                v.add(COVERAGE, f"{g.label()}: home/away does not alternate "
                                f"correctly for cycle {g.cycle}", g)

    for (pair, cycle) in expected_home:
        if (pair, cycle) not in seen:
            v.add(COVERAGE, f"{pair[0]} vs {pair[1]}: missing in cycle {cycle}")

    # (b) unique (date, venue, slot)
    by_resource: dict[tuple, list[Game]] = defaultdict(list)
    for g in games:
        by_resource[g.resource_key].append(g)
    for (d, venue, slot), clash in by_resource.items():
        if len(clash) > 1:
            v.add(RESOURCE_CONFLICT,
                  f"{len(clash)} games share {venue}/{slot} on {d}", *clash)

    # (c) no team plays twice on one date
    by_team_date: dict[tuple[str, object], list[Game]] = defaultdict(list)
    for g in games:
        by_team_date[(g.home_team, g.date)].append(g)
        by_team_date[(g.away_team, g.date)].append(g)
    for (team, d), clash in by_team_date.items():
        if len(clash) > 1:
            v.add(TEAM_DATE_CONFLICT,
                  f"{team} plays {len(clash)} games on {d}", *clash)

    # (d) dates inside the window, on allowed weekdays, not blacked out
    makeup = makeup_dates(season)
    for g in games:
        if g.played:
            continue
        if not season.start_date <= g.date <= season.end_date:
            v.add(CALENDAR, f"{g.label()}: outside season window "
                            f"{season.start_date}..{season.end_date}", g)
        elif DayOfWeek.of(g.date) not in season.allowed_weekdays:
            v.add(CALENDAR, f"{g.label()}: {DayOfWeek.of(g.date).name} "
                            f"is not an allowed weekday", g)
        elif g.date in season.blackout_dates:
            v.add(CALENDAR, f"{g.label()}: blackout date", g)
        elif g.date in makeup:
            warnings.append(f"{g.label()}: scheduled on makeup day {g.date}")

    # (e) home/away balance within 1
    home_counts: dict[str, int] = defaultdict(int)
    away_counts: dict[str, int] = defaultdict(int)
    for g in counted:
        home_counts[g.home_team] += 1
        away_counts[g.away_team] += 1
    for t in sorted(team_ids):
        h = home_counts.get(t, 0)
        a = away_counts.get(t, 0)
        if abs(h - a) > 1 + extra_tolerance.get(t, 0):
            team_games = [g for g in counted if g.involves(t)]
            v.add(HOME_AWAY_BALANCE,
                  f"{t} home/away imbalance: {h}H/{a}A (diff={h - a})",
                  *team_games)

    errors = [e for rule in RULES for e in v.errors.get(rule, [])]
    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "violations": {
            rule: {"errors": list(v.errors[rule]), "games": list(v.games[rule])}
            for rule in RULES if v.errors.get(rule)
        },
    }


def assert_valid(games: list[Game], season: Season, team_ids: list[str]) -> dict:
    """Validate and raise ScheduleInvariantViolation on the first broken rule."""
    result = validate_schedule(games, season, team_ids)
    if not result["valid"]:
        rule = next(r for r in RULES if r in result["violations"])
        broken = result["violations"][rule]
        raise ScheduleInvariantViolation(rule, broken["games"], result["errors"])
    return result


def format_validation_report(result: dict) -> str:
    """Format validation results as text."""
    lines = []
    lines.append("=" * 60)
    lines.append("SCHEDULE VALIDATION REPORT")
    lines.append("=" * 60)

    if result["valid"]:
        lines.append("\nRESULT: VALID (no rule violations)")
    else:
        lines.append(f"\nRESULT: INVALID ({len(result['errors'])} violations)")

    for rule, detail in result.get("violations", {}).items():
        lines.append(f"\n--- {rule.upper()} ({len(detail['errors'])}) ---")
        for e in detail["errors"]:
            lines.append(f"  ERROR: {e}")

    if result["warnings"]:
        lines.append(f"\n--- WARNINGS ({len(result['warnings'])}) ---")
        for w in result["warnings"]:
            lines.append(f"  WARN: {w}")

    return "\n".join(lines)
