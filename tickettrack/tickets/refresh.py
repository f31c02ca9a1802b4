"""Refresh one (game, ticket quantity) pair and read it back ranked."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncIterator, Iterable

from tickettrack.models import Game, TicketQuantityGroup
from tickettrack.store import TicketStore
from tickettrack.ticket_apps.base import TicketApp, TicketAppName
from tickettrack.tickets.aggregate import (
    DEFAULT_SCRAPE_TIMEOUT_SECONDS,
    FailedTickets,
    IncompleteTicketApp,
    collect_tickets,
)
from tickettrack.tickets.ranking import RankedTickets, rank_tickets
from tickettrack.tickets.reconcile import load_quantity_group, reconcile_tickets

logger = logging.getLogger(__name__)


@dataclass
class _PairLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


# Entries live only while a refresh of the pair is running or waiting.
_refresh_locks: dict[tuple[int, int], _PairLock] = {}


class RefreshFailedError(RuntimeError):
    pass


@dataclass(frozen=True)
class RefreshResult:
    scraped_at: datetime
    success_count: int
    game: Game
    failed_tickets: list[FailedTickets] = field(default_factory=list)
    incomplete_apps: list[IncompleteTicketApp] = field(default_factory=list)


@asynccontextmanager
async def _refresh_lock(game_id: int, quantity: int) -> AsyncIterator[None]:
    key = (game_id, quantity)
    entry = _refresh_locks.setdefault(key, _PairLock())
    entry.users += 1
    try:
        async with entry.lock:
            yield
    finally:
        entry.users -= 1
        if entry.users == 0:
            del _refresh_locks[key]


def event_urls_for(game: Game) -> dict[TicketAppName, str]:
    return {TicketAppName(entry.app): entry.event_url for entry in game.ticket_app_urls}


async def refresh_tickets(
    store: TicketStore,
    game_id: int,
    quantity: int,
    ticket_apps: Iterable[TicketApp] | None = None,
    timeout_seconds: float = DEFAULT_SCRAPE_TIMEOUT_SECONDS,
) -> RefreshResult:
    """Scrape all apps for a game and replace its group for ``quantity``.

    Raises GameNotFoundError for an unknown game and RefreshFailedError when
    no app produced a ticket; in that case nothing is written. Refreshes of
    the same pair run one at a time within this process.
    """

    async with _refresh_lock(game_id, quantity):
        game = store.find_game_by_id(game_id)
        scraped_at = datetime.now(timezone.utc)
        logger.info("Refreshing tickets game_id=%s quantity=%s", game_id, quantity)

        aggregate = await collect_tickets(
            event_urls_for(game),
            quantity,
            ticket_apps=ticket_apps,
            timeout_seconds=timeout_seconds,
        )
        if not aggregate.tickets:
            reasons = ", ".join(
                f"{entry.app.value}: {entry.reason}" for entry in aggregate.incomplete_apps
            )
            logger.warning(
                "Refresh found no tickets game_id=%s quantity=%s (%s)",
                game_id,
                quantity,
                reasons,
            )
            raise RefreshFailedError("No tickets found for this game")

        game = reconcile_tickets(store, game_id, quantity, aggregate.tickets, scraped_at)
        logger.info(
            "Refresh done game_id=%s quantity=%s tickets=%s incomplete=%s",
            game_id,
            quantity,
            len(aggregate.tickets),
            len(aggregate.incomplete_apps),
        )
        return RefreshResult(
            scraped_at=scraped_at,
            success_count=len(aggregate.tickets),
            game=game,
            failed_tickets=aggregate.failed_tickets,
            incomplete_apps=aggregate.incomplete_apps,
        )


def fetch_ranked_tickets(
    store: TicketStore,
    game_id: int,
    quantity: int,
) -> tuple[TicketQuantityGroup, RankedTickets]:
    group = load_quantity_group(store, game_id, quantity)
    return group, rank_tickets(group.tickets)
