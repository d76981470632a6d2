"""Standalone verifier for season schedules.

Validates a schedule by reading a schedule CSV + season YAML.
Usage: seasonsched-verify <schedule_csv> [season_yaml]
"""

import csv
import logging
import sys
from pathlib import Path

from seasonsched.config import load_config, parse_date
from seasonsched.constraints import format_validation_report, validate_schedule
from seasonsched.errors import SeasonConfigError
from seasonsched.models import Game, GameState
from seasonsched.stats import compute_stats, format_stats_report

logger = logging.getLogger(__name__)


def parse_csv_schedule(csv_path: str | Path, season_id: str) -> list[Game]:
    """Parse a schedule CSV (see output.CSV_COLUMNS) back into Game objects."""
    games = []
    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        for line_no, row in enumerate(reader, start=2):
            date_str = (row.get("Date") or "").strip()
            home = (row.get("Home") or "").strip()
            away = (row.get("Away") or "").strip()
            if not date_str or not home or not away:
                logger.warning("%s:%d: skipping incomplete row", csv_path, line_no)
                continue
            games.append(Game(
                season_id=season_id,
                home_team=home,
                away_team=away,
                venue_id=(row.get("Venue") or "").strip(),
                slot_id=(row.get("Slot") or "").strip(),
                date=parse_date(date_str),
                cycle=int(row.get("Cycle") or 1),
                round_number=int(row.get("Round") or 0),
                state=GameState((row.get("State") or "scheduled").strip()),
            ))
    return games


def verify_file(csv_path: str | Path, config: dict) -> dict:
    season = config["season"]
    team_ids = [t.id for t in config["teams"] if t.active]
    games = parse_csv_schedule(csv_path, season.id)
    logger.info("Loaded %d games from %s", len(games), csv_path)
    result = validate_schedule(games, season, team_ids)
    result["games"] = games
    result["team_ids"] = team_ids
    return result


def main():
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    if len(sys.argv) < 2:
        print("Usage: seasonsched-verify <schedule.csv> [season.yaml]")
        print("  Validates a schedule CSV against the rules of a season file.")
        sys.exit(1)

    csv_path = sys.argv[1]
    config_path = sys.argv[2] if len(sys.argv) > 2 else "season.yaml"

    for p in (csv_path, config_path):
        if not Path(p).exists():
            print(f"Error: {p} not found")
            sys.exit(1)

    try:
        config = load_config(config_path)
    except SeasonConfigError as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    result = verify_file(csv_path, config)
    if not result["games"]:
        print("No games found in CSV. Check the format.")
        sys.exit(1)

    print(format_validation_report(result))
    stats = compute_stats(result["games"], result["team_ids"])
    print("\n" + format_stats_report(stats))
    sys.exit(0 if result["valid"] else 1)


if __name__ == "__main__":
    main()
