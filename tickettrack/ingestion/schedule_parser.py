"""Parser for team schedule payloads (``data.gscd.g`` game lists)."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import Any
from zoneinfo import ZoneInfo

from tickettrack.ingestion.schema import GameIngestDTO
from tickettrack.ingestion.teams import SportsTeam

logger = logging.getLogger(__name__)
SCHEDULE_TZ = ZoneInfo("America/New_York")


def _schedule_games(payload: dict[str, Any]) -> list:
    data = payload.get("data")
    gscd = data.get("gscd") if isinstance(data, dict) else None
    games = gscd.get("g") if isinstance(gscd, dict) else None
    return games if isinstance(games, list) else []


def _game_day_end(value: Any) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        day = date.fromisoformat(value[:10])
    except ValueError:
        return None
    return datetime.combine(day, time(23, 59, 59), tzinfo=SCHEDULE_TZ)


def _parse_start_time(value: Any) -> datetime | None:
    # Feed times are Eastern wall-clock without an offset.
    if not isinstance(value, str):
        return None
    try:
        local = datetime.fromisoformat(value)
    except ValueError:
        return None
    if local.tzinfo is None:
        local = local.replace(tzinfo=SCHEDULE_TZ)
    return local.astimezone(timezone.utc)


def _is_home_game(game: dict[str, Any], team: SportsTeam) -> bool:
    return (
        game.get("an") == team.venue
        and game.get("ac") == team.city
        and game.get("as") == team.state
    )


def parse_home_games(
    payload: dict,
    team: SportsTeam,
    now: datetime | None = None,
) -> list[GameIngestDTO]:
    """Return the team's home games whose game day has not ended yet."""

    now = now or datetime.now(timezone.utc)
    home_games: list[GameIngestDTO] = []

    for game in _schedule_games(payload):
        if not isinstance(game, dict) or not _is_home_game(game, team):
            continue
        game_day_end = _game_day_end(game.get("gdte"))
        if game_day_end is None or game_day_end <= now:
            continue

        start_time = _parse_start_time(game.get("etm"))
        visitor = game.get("v")
        if start_time is None or not isinstance(visitor, dict):
            logger.warning("Skipping malformed schedule entry gid=%s", game.get("gid"))
            continue
        away_team = f"{visitor.get('tc', '')} {visitor.get('tn', '')}".strip()
        if not away_team:
            logger.warning("Skipping schedule entry without visitor gid=%s", game.get("gid"))
            continue

        home_games.append(
            GameIngestDTO(
                home_team=team.name,
                away_team=away_team,
                start_time=start_time,
                venue=team.venue,
                city=team.city,
                state=team.state,
            )
        )

    return home_games
