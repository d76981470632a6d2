#!/usr/bin/env python3
"""Season Schedule Builder.

Generate mode (default):
    seasonsched [season.yaml] [-o OUTDIR] [-v]

    Generates a schedule from the season file and writes:
      {OUTDIR}/schedule.csv  - Canonical game list (date, teams, venue, slot)
      {OUTDIR}/stats.txt     - Validation report + statistics

Verify mode:
    seasonsched --verify <schedule.csv> [season.yaml]

    Re-imports a schedule CSV and checks every rule against the season file.
    Exit code 0 if valid, 1 if violations found.

Examples:
    seasonsched                            # default season.yaml
    seasonsched spring.yaml -o spring2026  # custom file and output dir
    seasonsched --verify output/schedule.csv
"""

import argparse
import logging
import sys
from pathlib import Path

from seasonsched.config import check_config, load_config, store_from_config
from seasonsched.constraints import format_validation_report
from seasonsched.errors import ResourceShortage, SchedulingError
from seasonsched.lifecycle import REGENERABLE_STATES, SeasonController
from seasonsched.output import write_schedule
from seasonsched.stats import compute_stats, format_stats_report
from seasonsched.verify import verify_file

logger = logging.getLogger("seasonsched")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Season Schedule Builder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Output files (generate mode):
  {outdir}/schedule.csv  Canonical game list for the live-scoring system
  {outdir}/stats.txt     Validation report + balance statistics

Exit codes:
  0  Schedule valid
  1  Configuration error, resource shortage, or rule violations
""",
    )
    parser.add_argument(
        "config", nargs="?", default="season.yaml",
        help="Path to season YAML file (default: season.yaml)"
    )
    parser.add_argument(
        "--output-dir", "-o", default="output",
        help="Output directory for generated files (default: output/)"
    )
    parser.add_argument(
        "--verify", metavar="CSV",
        help="Verify an existing schedule CSV instead of generating"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Log resolver decisions"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    config_path = args.config
    if not Path(config_path).exists():
        logger.error("Error: config file %s not found", config_path)
        return 1

    logger.info("Loading season from %s...", config_path)
    try:
        config = load_config(config_path)
    except SchedulingError as exc:
        logger.error("%s", exc)
        return 1

    if args.verify:
        if not Path(args.verify).exists():
            logger.error("Error: %s not found", args.verify)
            return 1
        logger.info("Verifying schedule from %s...", args.verify)
        result = verify_file(args.verify, config)
        print(format_validation_report(result))
        stats = compute_stats(result["games"], result["team_ids"])
        print("\n" + format_stats_report(stats))
        return 0 if result["valid"] else 1

    season = config["season"]
    preflight = check_config(season, config["teams"], config["venues"], config["slots"])
    for w in preflight["warnings"]:
        logger.warning("Warning: %s", w)
    if not preflight["valid"]:
        for e in preflight["errors"]:
            logger.error("Error: %s", e)
        return 1

    store = store_from_config(config)
    controller = SeasonController(store, season.id)
    logger.info("Generating schedule for %s...", season.name or season.id)
    try:
        if store.get_season(season.id).state in REGENERABLE_STATES:
            result = controller.regenerate()
        else:
            result = controller.generate()
    except ResourceShortage as exc:
        logger.error("%s", exc)
        logger.error("Add a venue or time slot, widen the date window, "
                     "or reduce the cycle count.")
        return 1
    except SchedulingError as exc:
        logger.error("%s", exc)
        return 1

    games = store.games(season.id)
    report = format_validation_report(result.validation)
    team_ids = [t.id for t in config["teams"] if t.active]
    stats_text = format_stats_report(compute_stats(games, team_ids))
    print(report)
    print("\n" + stats_text)

    slot_order = {s.id: s.display_order for s in config["slots"]}
    venue_order = {v.id: v.display_order for v in config["venues"]}
    write_schedule(games, args.output_dir, slot_order, venue_order)
    stats_path = Path(args.output_dir) / "stats.txt"
    stats_path.write_text(report + "\n\n" + stats_text)
    logger.info("Written: %s", stats_path)

    logger.info("\nSchedule generated successfully!")
    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
