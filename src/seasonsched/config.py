"""Season file loading and pre-flight checks for the season scheduler."""

from datetime import date, time, timedelta
from pathlib import Path

import yaml

from seasonsched.errors import SeasonConfigError
from seasonsched.models import (
    DEFAULT_WEEKDAYS, DayOfWeek, Game, GameState, Season, SeasonState, Team,
    TimeSlot, Venue,
)
from seasonsched.pool import canonical_resources, makeup_dates, scheduling_dates
from seasonsched.roundrobin import expected_pairing_count
from seasonsched.store import InMemoryStore

MAX_RECOMMENDED_CYCLES = 4
MAX_RECOMMENDED_TEAMS = 20


def parse_time(s: str) -> time:
    """Parse time strings like '5:30pm', '10am', '17:00'."""
    s = s.strip()
    s_lower = s.lower()

    is_pm = s_lower.endswith("pm")
    is_am = s_lower.endswith("am")

    s_clean = s_lower
    if is_pm or is_am:
        s_clean = s_clean[:-2].strip()

    if ":" in s_clean:
        parts = s_clean.split(":")
        h = int(parts[0])
        m = int(parts[1])
    else:
        h = int(s_clean)
        m = 0

    if is_pm and h < 12:
        h += 12
    elif is_am and h == 12:
        h = 0

    return time(h, m)


def parse_date(s: str) -> date:
    """Parse date string YYYY-MM-DD."""
    parts = s.strip().split("-")
    return date(int(parts[0]), int(parts[1]), int(parts[2]))


def parse_date_range(s: str) -> tuple[date, date]:
    """Parse 'YYYY-MM-DD:YYYY-MM-DD' into (start, end) dates."""
    parts = s.split(":")
    return parse_date(parts[0]), parse_date(parts[1])


def _expand_dates(values, label: str, errors: list[str]) -> frozenset:
    """Single dates and 'start:end' ranges -> set of dates.

    Entries that do not parse are reported in ``errors`` and skipped.
    """
    out = set()
    for v in values or []:
        s = str(v)
        try:
            if ":" in s:
                start, end = parse_date_range(s)
            else:
                start = end = parse_date(s)
        except (IndexError, ValueError):
            errors.append(f"{label}: invalid date or range '{s}'")
            continue
        d = start
        while d <= end:
            out.add(d)
            d += timedelta(days=1)
    return frozenset(out)


def _parse_field(raw: dict, key: str, parse, errors: list[str], default=None):
    """Parse ``raw[key]``, reporting a bad value in ``errors`` instead of raising."""
    value = raw.get(key)
    if value is None:
        return default
    try:
        return parse(value)
    except (IndexError, KeyError, TypeError, ValueError):
        errors.append(f"season.{key}: invalid value '{value}'")
        return default


def _entries(raw_list, kind: str, errors: list[str]) -> list[dict]:
    """Accept either a list of ids or a list of mappings with an 'id' key."""
    entries = []
    for i, item in enumerate(raw_list or []):
        if isinstance(item, dict):
            if "id" not in item:
                errors.append(f"{kind} #{i + 1} has no id")
                continue
            entries.append(item)
        else:
            entries.append({"id": str(item)})
    seen = set()
    for e in entries:
        e["id"] = str(e["id"])
        if e["id"] in seen:
            errors.append(f"Duplicate {kind} id {e['id']}")
        seen.add(e["id"])
    return entries


def load_config(path: str | Path) -> dict:
    """Load and validate a season YAML file, returning structured data.

    Returns dict with:
    - season: Season
    - teams: list[Team]
    - venues: list[Venue]
    - slots: list[TimeSlot]
    - games: list[Game] (previously stored games, if any)
    """
    path = Path(path)
    with open(path) as f:
        try:
            raw = yaml.safe_load(f) or {}
        except (yaml.YAMLError, ValueError) as exc:
            # PyYAML builds dates itself, so 2026-13-01 fails while loading
            raise SeasonConfigError([f"{path}: {exc}"]) from exc
    return parse_config(raw)


def parse_config(raw: dict) -> dict:
    errors = []
    sraw = raw.get("season")
    if not isinstance(sraw, dict):
        raise SeasonConfigError(["missing 'season' section"])

    for key in ("start_date", "end_date", "max_games_per_day"):
        if sraw.get(key) is None:
            errors.append(f"season.{key} is required")
    if errors:
        raise SeasonConfigError(errors)

    weekdays = sraw.get("weekdays")
    if weekdays:
        allowed = set()
        for d in weekdays:
            try:
                allowed.add(DayOfWeek.from_str(str(d)))
            except KeyError:
                errors.append(f"season.weekdays: unknown weekday '{d}'")
        allowed = frozenset(allowed)
    else:
        allowed = DEFAULT_WEEKDAYS

    def _date(value):
        return parse_date(str(value))

    start = _parse_field(sraw, "start_date", _date, errors)
    end = _parse_field(sraw, "end_date", _date, errors)
    playoff = _parse_field(sraw, "playoff_start", _date, errors)
    max_per_day = _parse_field(sraw, "max_games_per_day", int, errors)
    cycles = _parse_field(sraw, "cycles", int, errors, default=1)
    flex_every = _parse_field(sraw, "flex_every", int, errors, default=0)
    state = _parse_field(sraw, "state", SeasonState, errors,
                         default=SeasonState.CONFIGURATION)
    blackouts = _expand_dates(sraw.get("blackout_dates"), "season.blackout_dates", errors)
    flex_dates = _expand_dates(sraw.get("flex_dates"), "season.flex_dates", errors)
    if errors:
        raise SeasonConfigError(errors)

    season = Season(
        id=str(sraw.get("id", "season")),
        league_id=str(sraw.get("league", "league")),
        name=sraw.get("name", ""),
        start_date=start,
        end_date=end,
        playoff_start=playoff,
        max_games_per_day=max_per_day,
        cycles=cycles,
        auto_regenerate=bool(sraw.get("auto_regenerate", False)),
        state=state,
        allowed_weekdays=allowed,
        blackout_dates=blackouts,
        slot_overrides={str(k): bool(v)
                        for k, v in (sraw.get("slot_overrides") or {}).items()},
        flex_every=flex_every,
        flex_dates=flex_dates,
    )
    errors.extend(season.config_errors())

    teams = [
        Team(id=e["id"], name=e.get("name", e["id"]),
             active=bool(e.get("active", True)))
        for e in _entries(raw.get("teams"), "team", errors)
    ]
    venues = [
        Venue(id=e["id"], name=e.get("name", e["id"]),
              active=bool(e.get("active", True)),
              display_order=int(e.get("order", i)))
        for i, e in enumerate(_entries(raw.get("venues"), "venue", errors))
    ]
    slots = []
    for i, e in enumerate(_entries(raw.get("slots"), "slot", errors)):
        times = {}
        for key in ("start", "end"):
            if key not in e:
                continue
            try:
                times[key] = parse_time(str(e[key]))
            except (IndexError, ValueError):
                errors.append(f"Slot {e['id']}: invalid {key} time '{e[key]}'")
        start, end = times.get("start"), times.get("end")
        if start and end and end <= start:
            errors.append(f"Slot {e['id']} ends before it starts")
        slots.append(TimeSlot(
            id=e["id"], name=e.get("name", e["id"]),
            start_time=start, end_time=end,
            active_by_default=bool(e.get("active", True)),
            display_order=int(e.get("order", i)),
        ))

    team_ids = {t.id for t in teams}
    venue_ids = {v.id for v in venues}
    slot_ids = {s.id for s in slots}
    for sid in season.slot_overrides:
        if sid not in slot_ids:
            errors.append(f"slot_overrides names unknown slot {sid}")

    games = []
    for i, graw in enumerate(raw.get("games") or []):
        try:
            game = Game(
                season_id=season.id,
                home_team=str(graw["home"]),
                away_team=str(graw["away"]),
                venue_id=str(graw["venue"]),
                slot_id=str(graw["slot"]),
                date=parse_date(str(graw["date"])),
                cycle=int(graw.get("cycle", 1)),
                round_number=int(graw.get("round", 0)),
                state=GameState(graw.get("state", GameState.SCHEDULED.value)),
            )
        except (KeyError, ValueError) as exc:
            errors.append(f"Game #{i + 1} is malformed: {exc}")
            continue
        for t in (game.home_team, game.away_team):
            if t not in team_ids:
                errors.append(f"Game #{i + 1} references unknown team {t}")
        if game.venue_id not in venue_ids:
            errors.append(f"Game #{i + 1} references unknown venue {game.venue_id}")
        if game.slot_id not in slot_ids:
            errors.append(f"Game #{i + 1} references unknown slot {game.slot_id}")
        games.append(game)

    if errors:
        raise SeasonConfigError(errors)

    return {
        "season": season,
        "teams": teams,
        "venues": venues,
        "slots": slots,
        "games": games,
    }


def store_from_config(config: dict) -> InMemoryStore:
    """Build an InMemoryStore holding everything in a loaded config."""
    season = config["season"]
    store = InMemoryStore()
    store.add_season(season)
    store.set_teams(season.league_id, config["teams"])
    store.set_venues(season.league_id, config["venues"])
    store.set_time_slots(season.league_id, config["slots"])
    store.set_games(season.id, config.get("games", []))
    return store


def check_config(season: Season, teams: list[Team], venues: list[Venue],
                 slots: list[TimeSlot]) -> dict:
    """Pre-flight check run before generation.

    Errors block generation outright; warnings flag seasons that will
    probably end in a resource shortage or an unusually long calendar.
    """
    errors = list(season.config_errors())
    warnings = []

    active = [t for t in teams if t.active]
    if len(active) < 2:
        errors.append(f"At least 2 active teams are required (have {len(active)})")
    if not any(v.active for v in venues):
        errors.append("At least one active venue is required")
    if not any(season.slot_usable(s) for s in slots):
        errors.append("At least one usable time slot is required")

    if len(active) > MAX_RECOMMENDED_TEAMS:
        warnings.append(
            f"{len(active)} teams is a lot for one division; consider splitting"
        )
    if season.cycles > MAX_RECOMMENDED_CYCLES:
        warnings.append(
            f"{season.cycles} cycles will make for a very long season"
        )

    resources = canonical_resources(season, venues, slots)
    if resources and season.max_games_per_day > len(resources):
        warnings.append(
            f"max_games_per_day={season.max_games_per_day} exceeds the "
            f"{len(resources)} venue/slot combinations available per day"
        )

    if not errors:
        held = makeup_dates(season)
        days = sum(1 for d in scheduling_dates(season) if d not in held)
        per_day = min(season.max_games_per_day, len(resources), len(active) // 2)
        needed = expected_pairing_count(len(active), season.cycles)
        capacity = days * per_day
        if needed > capacity:
            warnings.append(
                f"{needed} games needed but only {capacity} can be placed "
                f"({days} scheduling days x {per_day} games/day, "
                f"{len(held)} makeup day(s) held back)"
            )

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }
