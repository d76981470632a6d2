"""Round-robin pairing generation for the season scheduler."""

from collections import defaultdict

from seasonsched.errors import InsufficientTeams, InvalidCycleCount
from seasonsched.models import Pairing

_BYE = object()


def generate_pairings(team_ids: list[str], cycles: int) -> list[Pairing]:
    """Generate every (home, away, cycle) matchup using the circle method.

    For an odd number of teams a bye is inserted and held fixed while all real
    teams rotate, so every team rests exactly once per cycle. For an even
    number the first team is held fixed and alternates home/away by round.
    In all other pairings the team in the first half of the circle is at home,
    which keeps every team's home/away count within one per cycle.

    Even cycles swap every home/away assignment of the first cycle; odd cycles
    repeat it. Team order is taken from the input, so identical inputs always
    yield identical output.
    """
    if cycles < 1:
        raise InvalidCycleCount(cycles)
    if len(team_ids) < 2:
        raise InsufficientTeams(len(team_ids))
    if len(set(team_ids)) != len(team_ids):
        raise ValueError("Duplicate team identifiers in pairing input")

    base = _single_cycle(list(team_ids))

    pairings = []
    for cycle in range(1, cycles + 1):
        swap = cycle % 2 == 0
        for round_number, home, away in base:
            if swap:
                home, away = away, home
            pairings.append(Pairing(home, away, cycle, round_number))
    return pairings


def _single_cycle(teams: list[str]) -> list[tuple[int, str, str]]:
    """Return (round_number, home, away) for one full round-robin pass."""
    circle = list(teams)
    if len(circle) % 2 == 1:
        circle.insert(0, _BYE)
    n = len(circle)

    matches = []
    for r in range(n - 1):
        for i in range(n // 2):
            t1 = circle[i]
            t2 = circle[n - 1 - i]
            if t1 is _BYE or t2 is _BYE:
                continue
            if i == 0 and r % 2 == 1:
                t1, t2 = t2, t1
            matches.append((r + 1, t1, t2))

        # Keep position 0 fixed, rotate the rest one step
        circle = [circle[0]] + [circle[-1]] + circle[1:-1]

    return matches


def expected_pairing_count(team_count: int, cycles: int) -> int:
    return cycles * team_count * (team_count - 1) // 2


def verify_pairings(pairings: list[Pairing], team_ids: list[str],
                    cycles: int) -> dict:
    """Verify a pairing list is a complete, alternating multi-cycle round robin.

    Returns dict with:
    - valid: bool
    - errors: list of error strings
    - matchup_counts: dict of (team_a, team_b) -> count
    - games_per_team: dict of team -> game count
    """
    errors = []
    matchup_counts: dict[tuple[str, str], int] = defaultdict(int)
    games_per_team: dict[str, int] = {t: 0 for t in team_ids}
    by_pair: dict[tuple[str, str], dict[int, Pairing]] = defaultdict(dict)
    teams_in_round: dict[tuple[int, int], set[str]] = defaultdict(set)
    roster = set(team_ids)

    for p in pairings:
        if p.home == p.away:
            errors.append(f"{p.home} paired with itself in cycle {p.cycle}")
            continue
        for t in (p.home, p.away):
            if t not in roster:
                errors.append(f"Unknown team {t} in {p.label()}")
            seen = teams_in_round[(p.cycle, p.round_number)]
            if t in seen:
                errors.append(
                    f"Cycle {p.cycle} round {p.round_number}: {t} appears twice"
                )
            seen.add(t)
            games_per_team[t] = games_per_team.get(t, 0) + 1

        key = p.pair_key
        matchup_counts[key] += 1
        if p.cycle in by_pair[key]:
            errors.append(f"{key[0]} vs {key[1]}: met twice in cycle {p.cycle}")
        by_pair[key][p.cycle] = p

    ordered = list(team_ids)
    for i, t1 in enumerate(ordered):
        for t2 in ordered[i + 1:]:
            key = (t1, t2) if t1 < t2 else (t2, t1)
            count = matchup_counts.get(key, 0)
            if count != cycles:
                errors.append(
                    f"{t1} vs {t2}: met {count} times (expected {cycles})"
                )

    for key, per_cycle in by_pair.items():
        for c in sorted(per_cycle):
            nxt = per_cycle.get(c + 1)
            if nxt is not None and nxt.home == per_cycle[c].home:
                errors.append(
                    f"{key[0]} vs {key[1]}: {nxt.home} at home in cycles "
                    f"{c} and {c + 1}"
                )

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "matchup_counts": dict(matchup_counts),
        "games_per_team": games_per_team,
    }
