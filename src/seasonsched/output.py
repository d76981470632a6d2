"""CSV hand-off for generated season schedules."""

import csv
import logging
from io import StringIO
from pathlib import Path

from seasonsched.models import Game

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["Date", "Cycle", "Round", "Home", "Away", "Venue", "Slot", "State"]


def sort_games(games: list[Game], slot_order: dict[str, int] | None = None,
               venue_order: dict[str, int] | None = None) -> list[Game]:
    """Order games by date, then slot display order, then venue display order."""
    slot_order = slot_order or {}
    venue_order = venue_order or {}
    return sorted(games, key=lambda g: (
        g.date,
        slot_order.get(g.slot_id, 0), g.slot_id,
        venue_order.get(g.venue_id, 0), g.venue_id,
    ))


def format_schedule_csv(games: list[Game], slot_order: dict[str, int] | None = None,
                        venue_order: dict[str, int] | None = None) -> str:
    """Format schedule as the canonical game-list CSV.

    Columns: Date, Cycle, Round, Home, Away, Venue, Slot, State
    """
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_COLUMNS)

    for g in sort_games(games, slot_order, venue_order):
        writer.writerow([
            g.date.isoformat(), g.cycle, g.round_number,
            g.home_team, g.away_team, g.venue_id, g.slot_id, g.state.value,
        ])

    return output.getvalue()


def write_schedule(games: list[Game], output_dir: str | Path = "output",
                   slot_order: dict[str, int] | None = None,
                   venue_order: dict[str, int] | None = None) -> Path:
    """Write schedule.csv into output_dir/ and return its path."""
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    csv_path = out_dir / "schedule.csv"
    csv_path.write_text(format_schedule_csv(games, slot_order, venue_order))
    logger.info("Written: %s", csv_path)
    return csv_path
