from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal
import asyncio
import logging
import os

from fastapi import Depends, FastAPI, HTTPException, Query
from sqlalchemy.orm import Session

from tickettrack.db import Base, SessionLocal, engine, get_db
from tickettrack.ingestion.sync import ScheduleFetchError, ingest_home_games, sync_home_games
from tickettrack.ingestion.teams import TEAMS
from tickettrack.log_buffer import get_buffer_handler, install_buffer_handler
from tickettrack.schemas import (
    AddHomeGamesRequest,
    AddHomeGamesResponse,
    AddTicketAppUrlRequest,
    EventUrlsResponse,
    FailedTicketsOut,
    GameOut,
    GamesResponse,
    IncompleteTicketAppOut,
    RankedTicketsResponse,
    RefreshTicketsRequest,
    RefreshTicketsResponse,
    ScrapedTicketOut,
    ScrapeTicketsRequest,
    ScrapeTicketsResponse,
    SettingsOut,
    SettingsUpdate,
    TicketOut,
)
from tickettrack.settings import (
    clamp_scrape_timeout,
    enabled_ticket_apps,
    get_or_create_settings,
    snapshot_settings,
)
from tickettrack.store import (
    GameNotFoundError,
    QuantityGroupNotFoundError,
    SqlAlchemyTicketStore,
    StoreError,
)
from tickettrack.ticket_apps.base import TicketAppName
from tickettrack.ticket_apps.http import TicketAppFetchError
from tickettrack.ticket_apps.normalize import normalize_listings
from tickettrack.ticket_apps.registry import get_ticket_app
from tickettrack.tickets.ranking import TicketOrder
from tickettrack.tickets.refresh import RefreshFailedError, fetch_ranked_tickets, refresh_tickets

app = FastAPI(title="TicketTrack")
logger = logging.getLogger(__name__)
_auto_ingest_task: asyncio.Task | None = None
_auto_ingest_stop: asyncio.Event | None = None


def get_store(db: Session = Depends(get_db)) -> SqlAlchemyTicketStore:
    return SqlAlchemyTicketStore(db)


def _parse_auto_ingest_teams(raw: str) -> list[str]:
    teams = [team.strip().lower() for team in raw.split(",") if team.strip()]
    invalid = [team for team in teams if team not in TEAMS]
    if invalid:
        logger.error(
            "Auto-ingest disabled due to unsupported teams: %s. Supported: %s",
            ", ".join(invalid),
            ", ".join(sorted(TEAMS)),
        )
        return []
    return teams


def _auto_ingest_enabled() -> bool:
    with SessionLocal() as db:
        return snapshot_settings(get_or_create_settings(db)).auto_ingest_enabled


async def _run_auto_ingest_once(teams: list[str]) -> None:
    for team in teams:
        result = await asyncio.to_thread(sync_home_games, team)
        logger.info(
            "Auto-ingest done: team=%s fetched=%s inserted=%s skipped=%s errors=%s",
            team,
            result.total_fetched,
            result.inserted,
            result.skipped,
            result.errors,
        )


async def _auto_ingest_loop(interval_minutes: int, teams: list[str]) -> None:
    if interval_minutes < 1:
        logger.error("Auto-ingest interval must be >= 1 minute.")
        return
    if not teams:
        logger.error("Auto-ingest has no valid teams configured.")
        return

    logger.info(
        "Auto-ingest configured: interval=%s minutes teams=%s",
        interval_minutes,
        ",".join(teams),
    )
    while _auto_ingest_stop and not _auto_ingest_stop.is_set():
        try:
            if await asyncio.to_thread(_auto_ingest_enabled):
                await _run_auto_ingest_once(teams)
            else:
                logger.info("Auto-ingest skipped: disabled in settings.")
        except Exception:
            logger.exception("Auto-ingest failed.")
        try:
            await asyncio.wait_for(
                _auto_ingest_stop.wait(),
                timeout=interval_minutes * 60,
            )
        except asyncio.TimeoutError:
            continue


@app.on_event("startup")
async def start_auto_ingest() -> None:
    global _auto_ingest_task, _auto_ingest_stop
    install_buffer_handler()
    Base.metadata.create_all(bind=engine)
    logger.info("App starting up, initializing auto-ingest")
    interval_minutes = int(os.getenv("AUTO_INGEST_INTERVAL_MINUTES", "720"))
    teams = _parse_auto_ingest_teams(os.getenv("AUTO_INGEST_TEAMS", "celtics"))
    _auto_ingest_stop = asyncio.Event()
    _auto_ingest_task = asyncio.create_task(_auto_ingest_loop(interval_minutes, teams))


@app.on_event("shutdown")
async def stop_auto_ingest() -> None:
    global _auto_ingest_task, _auto_ingest_stop
    if _auto_ingest_stop:
        _auto_ingest_stop.set()
    if _auto_ingest_task:
        await _auto_ingest_task
    _auto_ingest_task = None
    _auto_ingest_stop = None


@app.get("/api/games", response_model=GamesResponse)
def api_games(
    order: Literal["chronological"] = "chronological",
    store: SqlAlchemyTicketStore = Depends(get_store),
):
    try:
        games = store.list_games()
    except StoreError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return GamesResponse(
        games=[GameOut.model_validate(game) for game in games],
        count=len(games),
    )


@app.post("/api/games/home-games", response_model=AddHomeGamesResponse)
def api_add_home_games(
    payload: AddHomeGamesRequest,
    store: SqlAlchemyTicketStore = Depends(get_store),
):
    team = TEAMS.get(payload.team.strip().lower())
    if team is None:
        raise HTTPException(status_code=422, detail=f"Unsupported team: {payload.team}")

    try:
        result, new_games = ingest_home_games(store, team.key)
    except ScheduleFetchError as exc:
        raise HTTPException(status_code=502, detail=f"Error updating games: {exc}") from exc
    logger.info(
        "Home games added team=%s inserted=%s skipped=%s errors=%s",
        team.key,
        result.inserted,
        result.skipped,
        result.errors,
    )
    return AddHomeGamesResponse(
        message=f"{result.inserted} new game(s) saved",
        team=team.name,
        new_games=[GameOut.model_validate(game) for game in new_games],
    )


@app.post("/api/games/{game_id}/ticket-app-urls", response_model=GameOut)
def api_add_ticket_app_url(
    game_id: int,
    payload: AddTicketAppUrlRequest,
    store: SqlAlchemyTicketStore = Depends(get_store),
):
    try:
        game = store.upsert_ticket_app_url(game_id, payload.app, str(payload.ticket_app_url))
    except GameNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except StoreError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    logger.info("Ticket app URL saved game_id=%s app=%s", game_id, payload.app.value)
    return GameOut.model_validate(game)


@app.post("/api/games/{game_id}/refresh", response_model=RefreshTicketsResponse)
async def api_refresh_tickets(
    game_id: int,
    payload: RefreshTicketsRequest,
    db: Session = Depends(get_db),
):
    settings = snapshot_settings(get_or_create_settings(db))
    quantity = payload.ticket_quantity or settings.default_ticket_quantity
    try:
        result = await refresh_tickets(
            SqlAlchemyTicketStore(db),
            game_id,
            quantity,
            ticket_apps=enabled_ticket_apps(settings),
            timeout_seconds=settings.scrape_timeout_seconds,
        )
    except GameNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except RefreshFailedError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except StoreError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return RefreshTicketsResponse(
        scraped_at=result.scraped_at,
        success_count=result.success_count,
        failed_tickets=[FailedTicketsOut.model_validate(item) for item in result.failed_tickets],
        incomplete_apps=[
            IncompleteTicketAppOut.model_validate(item) for item in result.incomplete_apps
        ],
        game=GameOut.model_validate(result.game),
    )


@app.get("/api/games/{game_id}/tickets", response_model=RankedTicketsResponse)
def api_ranked_tickets(
    game_id: int,
    ticket_quantity: int | None = Query(None, ge=1, le=20),
    order: TicketOrder | None = None,
    db: Session = Depends(get_db),
):
    if ticket_quantity is None:
        ticket_quantity = snapshot_settings(get_or_create_settings(db)).default_ticket_quantity
    store = SqlAlchemyTicketStore(db)
    try:
        group, ranked = fetch_ranked_tickets(store, game_id, ticket_quantity)
    except (GameNotFoundError, QuantityGroupNotFoundError) as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except StoreError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    response = RankedTicketsResponse(
        game_id=game_id,
        ticket_quantity=ticket_quantity,
        last_updated=group.last_updated,
    )
    if order in (None, TicketOrder.CHEAPEST):
        response.cheapest = [TicketOut.model_validate(ticket) for ticket in ranked.cheapest]
    if order in (None, TicketOrder.BEST_VALUE):
        response.best_value = [TicketOut.model_validate(ticket) for ticket in ranked.best_value]
    return response


@app.post("/api/ticket-apps/{app_name}/event-urls", response_model=EventUrlsResponse)
def api_event_urls(app_name: TicketAppName):
    ticket_app = get_ticket_app(app_name)
    try:
        event_urls = ticket_app.scrape_event_urls()
    except TicketAppFetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return EventUrlsResponse(app=app_name, event_urls=event_urls)


@app.post("/api/ticket-apps/{app_name}/scrape", response_model=ScrapeTicketsResponse)
def api_scrape_tickets(app_name: TicketAppName, payload: ScrapeTicketsRequest):
    ticket_app = get_ticket_app(app_name)
    try:
        scraped = ticket_app.scrape_tickets(str(payload.url), payload.ticket_quantity)
    except TicketAppFetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    normalized = normalize_listings(app_name, scraped.raw_listings, payload.ticket_quantity)
    return ScrapeTicketsResponse(
        app=app_name,
        tickets=[ScrapedTicketOut.model_validate(ticket) for ticket in normalized.tickets],
        failed_count=normalized.failed_count + scraped.failed_count,
    )


def _settings_out(db: Session) -> SettingsOut:
    settings = get_or_create_settings(db)
    snapshot = snapshot_settings(settings)
    return SettingsOut(
        scrape_timeout_seconds=snapshot.scrape_timeout_seconds,
        default_ticket_quantity=snapshot.default_ticket_quantity,
        auto_ingest_enabled=snapshot.auto_ingest_enabled,
        enabled_ticket_apps=list(snapshot.enabled_ticket_apps),
        updated_at_utc=settings.updated_at_utc,
    )


@app.get("/api/settings", response_model=SettingsOut)
def api_get_settings(db: Session = Depends(get_db)):
    return _settings_out(db)


@app.put("/api/settings", response_model=SettingsOut)
def api_update_settings(payload: SettingsUpdate, db: Session = Depends(get_db)):
    settings = get_or_create_settings(db)
    if payload.scrape_timeout_seconds is not None:
        settings.scrape_timeout_seconds = clamp_scrape_timeout(payload.scrape_timeout_seconds)
    if payload.default_ticket_quantity is not None:
        settings.default_ticket_quantity = payload.default_ticket_quantity
    if payload.auto_ingest_enabled is not None:
        settings.auto_ingest_enabled = payload.auto_ingest_enabled
    if payload.enabled_ticket_apps is not None:
        settings.enabled_ticket_apps = ",".join(
            app_name.value for app_name in dict.fromkeys(payload.enabled_ticket_apps)
        )
    settings.updated_at_utc = datetime.now(timezone.utc)
    db.commit()
    logger.info("Settings updated")
    return _settings_out(db)


@app.get("/api/logs")
def api_logs(limit: int = Query(100, ge=1, le=200), level: str | None = None):
    min_level = logging.NOTSET
    if level:
        min_level = logging.getLevelName(level.strip().upper())
        if not isinstance(min_level, int):
            raise HTTPException(status_code=422, detail=f"Unknown log level: {level}")
    handler = get_buffer_handler()
    return {"entries": handler.entries(limit=limit, min_level=min_level)}
