from __future__ import annotations

import asyncio
import threading
import unittest

from support import (
    StubTicketApp,
    gametime_listing,
    make_game,
    make_session_factory,
    tickpick_listing,
)

from tickettrack.models import Ticket, TicketAppUrl
from tickettrack.store import GameNotFoundError, QuantityGroupNotFoundError, SqlAlchemyTicketStore
from tickettrack.ticket_apps.base import TicketAppName
from tickettrack.tickets.refresh import (
    RefreshFailedError,
    _refresh_locks,
    event_urls_for,
    fetch_ranked_tickets,
    refresh_tickets,
)


class _OverlapTrackingApp(StubTicketApp):
    """Stub app that records how many scrapes were running at once."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._guard = threading.Lock()
        self.active = 0
        self.max_active = 0

    def scrape_tickets(self, event_url: str, quantity: int):
        with self._guard:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            return super().scrape_tickets(event_url, quantity)
        finally:
            with self._guard:
                self.active -= 1


class RefreshTicketsTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.store = SqlAlchemyTicketStore(self.db)
        game = make_game()
        game.ticket_app_urls.append(
            TicketAppUrl(app="tickpick", event_url="https://www.tickpick.com/buy-event/1/")
        )
        self.game = self.store.create_game(game)

    def tearDown(self) -> None:
        self.db.close()

    async def test_successful_refresh_persists_group(self) -> None:
        tickpick = StubTicketApp(
            TicketAppName.TICKPICK,
            listings=[
                tickpick_listing(301, 1, "$150"),
                tickpick_listing(306, 15, "$60"),
                tickpick_listing(110, 2, "$20"),
                tickpick_listing(305, 4, "n/a"),
            ],
        )
        gametime = StubTicketApp(TicketAppName.GAMETIME, listings=[gametime_listing(315, 8, "$95")])

        result = await refresh_tickets(
            self.store, self.game.id, 2, ticket_apps=[tickpick, gametime]
        )

        self.assertEqual(3, result.success_count)
        self.assertEqual(
            [(TicketAppName.TICKPICK, 1), (TicketAppName.GAMETIME, 0)],
            [(entry.app, entry.failed_count) for entry in result.failed_tickets],
        )
        self.assertEqual(
            [(TicketAppName.GAMETIME, "missing URL")],
            [(entry.app, entry.reason) for entry in result.incomplete_apps],
        )
        self.assertEqual(3, self.db.query(Ticket).count())

        group, ranked = fetch_ranked_tickets(self.store, self.game.id, 2)
        self.assertIsNotNone(group.last_updated)
        self.assertEqual([60, 150], [ticket.price for ticket in ranked.cheapest])
        self.assertEqual([306, 301], [ticket.section for ticket in ranked.best_value])

    async def test_refresh_with_no_tickets_writes_nothing(self) -> None:
        tickpick = StubTicketApp(TicketAppName.TICKPICK, error=RuntimeError("blocked"))

        with self.assertRaises(RefreshFailedError) as ctx:
            await refresh_tickets(self.store, self.game.id, 2, ticket_apps=[tickpick])

        self.assertEqual("No tickets found for this game", str(ctx.exception))
        self.assertEqual(0, self.db.query(Ticket).count())
        with self.assertRaises(QuantityGroupNotFoundError):
            fetch_ranked_tickets(self.store, self.game.id, 2)

    async def test_failed_refresh_keeps_previous_group(self) -> None:
        good = StubTicketApp(TicketAppName.TICKPICK, listings=[tickpick_listing(305, 12, "$88")])
        await refresh_tickets(self.store, self.game.id, 2, ticket_apps=[good])

        broken = StubTicketApp(TicketAppName.TICKPICK, listings=[tickpick_listing(99, 1, "?")])
        with self.assertRaises(RefreshFailedError):
            await refresh_tickets(self.store, self.game.id, 2, ticket_apps=[broken])

        group, _ = fetch_ranked_tickets(self.store, self.game.id, 2)
        self.assertEqual([305], [ticket.section for ticket in group.tickets])

    async def test_refreshes_of_one_pair_run_one_at_a_time(self) -> None:
        tickpick = _OverlapTrackingApp(
            TicketAppName.TICKPICK,
            listings=[tickpick_listing(305, 12, "$88")],
            delay_seconds=0.2,
        )

        results = await asyncio.gather(
            refresh_tickets(self.store, self.game.id, 2, ticket_apps=[tickpick]),
            refresh_tickets(self.store, self.game.id, 2, ticket_apps=[tickpick]),
        )

        self.assertEqual([1, 1], [result.success_count for result in results])
        self.assertEqual(1, tickpick.max_active)
        self.assertEqual(1, self.db.query(Ticket).count())

    async def test_refreshes_of_different_quantities_overlap(self) -> None:
        tickpick = _OverlapTrackingApp(
            TicketAppName.TICKPICK,
            listings=[tickpick_listing(305, 12, "$88")],
            delay_seconds=0.2,
        )

        await asyncio.gather(
            refresh_tickets(self.store, self.game.id, 2, ticket_apps=[tickpick]),
            refresh_tickets(self.store, self.game.id, 4, ticket_apps=[tickpick]),
        )

        self.assertEqual(2, tickpick.max_active)

    async def test_refresh_locks_are_released_after_use(self) -> None:
        good = StubTicketApp(TicketAppName.TICKPICK, listings=[tickpick_listing(305, 12, "$88")])
        await refresh_tickets(self.store, self.game.id, 2, ticket_apps=[good])
        with self.assertRaises(RefreshFailedError):
            await refresh_tickets(
                self.store, self.game.id, 3, ticket_apps=[StubTicketApp(TicketAppName.TICKPICK)]
            )

        self.assertEqual({}, _refresh_locks)

    async def test_unknown_game(self) -> None:
        with self.assertRaises(GameNotFoundError):
            await refresh_tickets(self.store, 999, 2, ticket_apps=[])

    def test_event_urls_for_game(self) -> None:
        self.assertEqual(
            {TicketAppName.TICKPICK: "https://www.tickpick.com/buy-event/1/"},
            event_urls_for(self.game),
        )


if __name__ == "__main__":
    unittest.main()
