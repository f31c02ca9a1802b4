"""Sync a team's remaining home games into the local database."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from tickettrack.db import Base, SessionLocal, engine
from tickettrack.ingestion.schedule_client import fetch_schedule
from tickettrack.ingestion.schedule_parser import parse_home_games
from tickettrack.ingestion.schema import GameIngestDTO
from tickettrack.ingestion.teams import get_team
from tickettrack.models import Game
from tickettrack.store import SqlAlchemyTicketStore, StoreError, TicketStore

logger = logging.getLogger(__name__)


class ScheduleFetchError(RuntimeError):
    pass


@dataclass
class SyncResult:
    total_fetched: int = 0
    inserted: int = 0
    skipped: int = 0
    errors: int = 0


def _game_from_dto(dto: GameIngestDTO) -> Game:
    return Game(
        home_team=dto.home_team,
        away_team=dto.away_team,
        start_time=dto.start_time,
        venue=dto.venue,
        city=dto.city,
        state=dto.state,
    )


def ingest_home_games(
    store: TicketStore,
    team_key: str,
    now: datetime | None = None,
) -> tuple[SyncResult, list[Game]]:
    """Fetch, parse and insert a team's future home games.

    Games whose start time is already stored are skipped. Returns the
    counters and the games that were newly inserted. Raises ValueError for
    an unknown team and ScheduleFetchError when the feed cannot be read.
    """

    team = get_team(team_key)
    result = SyncResult()

    logger.info("Fetching schedule for team=%s", team.key)
    payload = fetch_schedule(team.key)
    if payload.get("error"):
        logger.error(
            "Fetch error team=%s error=%s details=%s",
            team.key,
            payload.get("error"),
            payload.get("details"),
        )
        raise ScheduleFetchError(f"Error fetching schedule for {team.name}: {payload['error']}")

    parsed_games = parse_home_games(payload, team, now=now)
    result.total_fetched = len(parsed_games)
    logger.info("Parsed %s future home games for team=%s", len(parsed_games), team.key)

    new_games: list[Game] = []
    for dto in parsed_games:
        try:
            saved = store.create_game(_game_from_dto(dto))
        except StoreError:
            result.errors += 1
            logger.exception("Failed inserting game start_time=%s", dto.start_time)
            continue
        if saved is None:
            result.skipped += 1
            logger.info("Skipped existing game start_time=%s", dto.start_time)
        else:
            result.inserted += 1
            new_games.append(saved)
            logger.info("Inserted game id=%s vs %s", saved.id, saved.away_team)

    return result, new_games


def sync_home_games(team_key: str, now: datetime | None = None) -> SyncResult:
    """Standalone sync used by the CLI and the background loop."""

    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        try:
            result, _ = ingest_home_games(SqlAlchemyTicketStore(db), team_key, now=now)
        except ScheduleFetchError:
            return SyncResult(errors=1)

    return result
