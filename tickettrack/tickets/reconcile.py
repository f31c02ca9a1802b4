"""Merge a successful scrape into a game's per-quantity ticket groups."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from tickettrack.models import Game, TicketQuantityGroup
from tickettrack.store import QuantityGroupNotFoundError, TicketStore
from tickettrack.ticket_apps.base import ScrapedTicket

logger = logging.getLogger(__name__)


def find_quantity_group(game: Game, quantity: int) -> TicketQuantityGroup | None:
    for group in game.ticket_quantity_groups:
        if group.quantity == quantity:
            return group
    return None


def load_quantity_group(store: TicketStore, game_id: int, quantity: int) -> TicketQuantityGroup:
    game = store.find_game_by_id(game_id)
    group = find_quantity_group(game, quantity)
    if group is None:
        raise QuantityGroupNotFoundError(
            f"Tickets not found for game id={game_id} quantity={quantity}"
        )
    return group


def reconcile_tickets(
    store: TicketStore,
    game_id: int,
    quantity: int,
    tickets: Sequence[ScrapedTicket],
    scraped_at: datetime,
) -> Game:
    """Replace the game's group for ``quantity`` with ``tickets``.

    A missing group is created. An existing group has every ticket it holds
    deleted from the store before the new list is attached. Groups for other
    quantities are left alone. The game is saved once at the end; store
    failures propagate unchanged.
    """

    game = store.find_game_by_id(game_id)
    saved_tickets = store.insert_tickets(tickets)

    group = find_quantity_group(game, quantity)
    if group is None:
        game.ticket_quantity_groups.append(
            TicketQuantityGroup(
                quantity=quantity,
                last_updated=scraped_at,
                tickets=list(saved_tickets),
            )
        )
        logger.info(
            "Created ticket group game_id=%s quantity=%s tickets=%s",
            game_id,
            quantity,
            len(saved_tickets),
        )
    else:
        stale_ids = [ticket.id for ticket in group.tickets]
        store.delete_tickets_by_ids(stale_ids)
        group.tickets = list(saved_tickets)
        group.last_updated = scraped_at
        logger.info(
            "Replaced ticket group game_id=%s quantity=%s deleted=%s inserted=%s",
            game_id,
            quantity,
            len(stale_ids),
            len(saved_tickets),
        )

    return store.save_game(game)
