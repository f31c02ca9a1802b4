"""Persistence gateway for games, quantity groups and tickets.

The ticket engine talks to storage only through ``TicketStore``.
``SqlAlchemyTicketStore`` implements it on a single Session: inserts and
deletes are flushed, and ``save_game`` commits, so one reconcile is one
transaction. Database errors roll the session back and surface as
``StoreError``; nothing here retries.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, Protocol

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tickettrack.models import Game, Ticket, TicketAppUrl
from tickettrack.ticket_apps.base import ScrapedTicket, TicketAppName

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    pass


class GameNotFoundError(LookupError):
    pass


class QuantityGroupNotFoundError(LookupError):
    pass


class TicketStore(Protocol):
    def find_game_by_id(self, game_id: int) -> Game: ...

    def list_games(self) -> list[Game]: ...

    def create_game(self, game: Game) -> Game | None: ...

    def insert_tickets(self, tickets: Iterable[ScrapedTicket]) -> list[Ticket]: ...

    def delete_tickets_by_ids(self, ticket_ids: Iterable[int]) -> None: ...

    def save_game(self, game: Game) -> Game: ...

    def upsert_ticket_app_url(self, game_id: int, app: TicketAppName, url: str) -> Game: ...


class SqlAlchemyTicketStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def _store_fault(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Store fault while %s", action)
            raise StoreError(f"Store fault while {action}: {exc}") from exc

    def find_game_by_id(self, game_id: int) -> Game:
        with self._store_fault("loading game"):
            game = self.db.query(Game).filter(Game.id == game_id).one_or_none()
        if game is None:
            raise GameNotFoundError(f"Game not found: id={game_id}")
        return game

    def list_games(self) -> list[Game]:
        with self._store_fault("listing games"):
            return self.db.query(Game).order_by(Game.start_time.asc()).all()

    def create_game(self, game: Game) -> Game | None:
        """Insert a game unless one already starts at the same time.

        Returns None when the start time is taken.
        """

        with self._store_fault("checking for existing game"):
            existing = (
                self.db.query(Game.id)
                .filter(Game.start_time == game.start_time)
                .one_or_none()
            )
        if existing is not None:
            return None

        try:
            self.db.add(game)
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent insert of the same start time.
            self.db.rollback()
            return None
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Store fault while creating game start_time=%s", game.start_time)
            raise StoreError(f"Store fault while creating game: {exc}") from exc
        self.db.refresh(game)
        return game

    def insert_tickets(self, tickets: Iterable[ScrapedTicket]) -> list[Ticket]:
        rows = [
            Ticket(
                section=ticket.section,
                row=ticket.row,
                price=ticket.price,
                quantity=ticket.quantity,
                app=TicketAppName(ticket.app).value,
                link=ticket.link,
            )
            for ticket in tickets
        ]
        with self._store_fault("inserting tickets"):
            self.db.add_all(rows)
            self.db.flush()
        return rows

    def delete_tickets_by_ids(self, ticket_ids: Iterable[int]) -> None:
        ids = [ticket_id for ticket_id in ticket_ids if ticket_id is not None]
        if not ids:
            return
        with self._store_fault("deleting tickets"):
            tickets = self.db.query(Ticket).filter(Ticket.id.in_(ids)).all()
            for ticket in tickets:
                # Detach first so a later reassignment of the group's list skips it.
                if ticket.group is not None and ticket in ticket.group.tickets:
                    ticket.group.tickets.remove(ticket)
                self.db.delete(ticket)
            self.db.flush()

    def save_game(self, game: Game) -> Game:
        with self._store_fault(f"saving game id={game.id}"):
            self.db.add(game)
            self.db.commit()
            self.db.refresh(game)
        return game

    def upsert_ticket_app_url(self, game_id: int, app: TicketAppName, url: str) -> Game:
        game = self.find_game_by_id(game_id)
        app_value = TicketAppName(app).value
        entry = next((item for item in game.ticket_app_urls if item.app == app_value), None)
        if entry is None:
            game.ticket_app_urls.append(TicketAppUrl(app=app_value, event_url=url))
        else:
            entry.event_url = url
        return self.save_game(game)
