"""Statistics and balance reporting for generated season schedules."""

from collections import defaultdict

from seasonsched.models import DayOfWeek, Game


def compute_stats(games: list[Game], team_ids: list[str]) -> dict:
    """Compute per-team and per-resource statistics for a schedule.

    Returns dict with all stats needed for balance reporting.
    """
    all_teams = sorted(team_ids)

    home_counts = defaultdict(int)
    away_counts = defaultdict(int)
    total_games = defaultdict(int)
    played_counts = defaultdict(int)

    # Matchup matrix
    matchup_counts = defaultdict(lambda: defaultdict(int))  # team -> opponent -> count

    venue_counts = defaultdict(int)
    slot_counts = defaultdict(int)
    games_per_date = defaultdict(int)
    day_counts = defaultdict(int)
    cycles = set()

    for game in games:
        h = game.home_team
        a = game.away_team

        home_counts[h] += 1
        away_counts[a] += 1
        total_games[h] += 1
        total_games[a] += 1
        if game.played:
            played_counts[h] += 1
            played_counts[a] += 1

        matchup_counts[h][a] += 1
        matchup_counts[a][h] += 1

        venue_counts[game.venue_id] += 1
        slot_counts[game.slot_id] += 1
        games_per_date[game.date] += 1
        day_counts[DayOfWeek.of(game.date).name] += 1
        cycles.add(game.cycle)

    dates = sorted(games_per_date)
    return {
        "all_teams": all_teams,
        "home_counts": dict(home_counts),
        "away_counts": dict(away_counts),
        "total_games": dict(total_games),
        "played_counts": dict(played_counts),
        "matchup_counts": {k: dict(v) for k, v in matchup_counts.items()},
        "venue_counts": dict(venue_counts),
        "slot_counts": dict(slot_counts),
        "games_per_date": dict(games_per_date),
        "day_counts": dict(day_counts),
        "game_count": len(games),
        "days_used": len(dates),
        "first_date": dates[0] if dates else None,
        "last_date": dates[-1] if dates else None,
        "cycles": sorted(cycles),
        "avg_games_per_day": (len(games) / len(dates)) if dates else 0.0,
    }


def format_stats_report(stats: dict) -> str:
    """Format statistics into a human-readable report."""
    lines = []
    lines.append("=" * 70)
    lines.append("SCHEDULE STATISTICS")
    lines.append("=" * 70)

    lines.append(f"\nGames: {stats['game_count']}   Days used: {stats['days_used']}   "
                 f"Avg games/day: {stats['avg_games_per_day']:.1f}")
    if stats["first_date"]:
        lines.append(f"First game: {stats['first_date']}   Last game: {stats['last_date']}")

    all_teams = stats["all_teams"]

    lines.append("\n--- HOME/VISITOR BALANCE ---")
    lines.append(f"{'Team':<10} {'Home':>5} {'Vis':>5} {'Total':>5} {'Diff':>5} {'Played':>6}")
    lines.append("-" * 42)
    for t in all_teams:
        h = stats["home_counts"].get(t, 0)
        a = stats["away_counts"].get(t, 0)
        tot = stats["total_games"].get(t, 0)
        played = stats["played_counts"].get(t, 0)
        diff = h - a
        flag = " ***" if abs(diff) > 1 else ""
        lines.append(f"{t:<10} {h:>5} {a:>5} {tot:>5} {diff:>+5} {played:>6}{flag}")

    lines.append("\n--- MATCHUP MATRIX ---")
    header = f"{'':>10}"
    for t in all_teams:
        header += f" {t[:5]:>5}"
    lines.append(header)
    lines.append("-" * (10 + 6 * len(all_teams)))
    for t1 in all_teams:
        row = f"{t1:>10}"
        for t2 in all_teams:
            if t1 == t2:
                row += "     -"
            else:
                c = stats["matchup_counts"].get(t1, {}).get(t2, 0)
                row += f" {c:>5}"
        lines.append(row)

    lines.append("\n--- GAMES PER VENUE ---")
    for venue, c in sorted(stats["venue_counts"].items()):
        lines.append(f"  {venue:<20} {c:>4}")

    lines.append("\n--- GAMES PER TIME SLOT ---")
    for slot, c in sorted(stats["slot_counts"].items()):
        lines.append(f"  {slot:<20} {c:>4}")

    lines.append("\n--- GAMES PER DATE ---")
    for d, c in sorted(stats["games_per_date"].items()):
        lines.append(f"  {d.strftime('%a %Y-%m-%d')}  {c:>3}")

    return "\n".join(lines)
