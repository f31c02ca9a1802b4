"""Scrape every ticket app that has an event URL for a game, concurrently."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from tickettrack.ticket_apps.base import ScrapedTicket, TicketApp, TicketAppName
from tickettrack.ticket_apps.normalize import NormalizeResult, normalize_listings
from tickettrack.ticket_apps.registry import TICKET_APPS

logger = logging.getLogger(__name__)

MISSING_URL_REASON = "missing URL"
ZERO_TICKETS_REASON = "zero tickets"
DEFAULT_SCRAPE_TIMEOUT_SECONDS = 90


@dataclass(frozen=True)
class IncompleteTicketApp:
    app: TicketAppName
    reason: str


@dataclass(frozen=True)
class FailedTickets:
    app: TicketAppName
    failed_count: int


@dataclass(frozen=True)
class AggregateResult:
    tickets: list[ScrapedTicket] = field(default_factory=list)
    incomplete_apps: list[IncompleteTicketApp] = field(default_factory=list)
    failed_tickets: list[FailedTickets] = field(default_factory=list)


async def _scrape_app(
    ticket_app: TicketApp,
    event_url: str,
    quantity: int,
    timeout_seconds: float,
) -> NormalizeResult:
    scrape_result = await asyncio.wait_for(
        asyncio.to_thread(ticket_app.scrape_tickets, event_url, quantity),
        timeout=timeout_seconds,
    )
    normalized = normalize_listings(ticket_app.name, scrape_result.raw_listings, quantity)
    return NormalizeResult(
        tickets=normalized.tickets,
        failed_count=normalized.failed_count + scrape_result.failed_count,
    )


async def collect_tickets(
    event_urls: Mapping[TicketAppName, str],
    quantity: int,
    ticket_apps: Iterable[TicketApp] | None = None,
    timeout_seconds: float = DEFAULT_SCRAPE_TIMEOUT_SECONDS,
) -> AggregateResult:
    """Scrape and normalize tickets from every app, waiting for all of them.

    Apps without an event URL are skipped as "missing URL". An app that
    raises, times out or yields no valid tickets is reported as
    "zero tickets"; it never stops the other apps from contributing.
    """

    apps = list(ticket_apps) if ticket_apps is not None else list(TICKET_APPS.values())
    incomplete_apps: list[IncompleteTicketApp] = []
    scraped_apps: list[TicketApp] = []
    scrapes = []

    for ticket_app in apps:
        event_url = event_urls.get(ticket_app.name)
        if not event_url:
            incomplete_apps.append(IncompleteTicketApp(ticket_app.name, MISSING_URL_REASON))
            continue
        scraped_apps.append(ticket_app)
        scrapes.append(_scrape_app(ticket_app, event_url, quantity, timeout_seconds))

    outcomes = await asyncio.gather(*scrapes, return_exceptions=True)

    tickets: list[ScrapedTicket] = []
    failed_by_app: dict[TicketAppName, int] = {}
    for ticket_app, outcome in zip(scraped_apps, outcomes):
        if isinstance(outcome, asyncio.TimeoutError):
            logger.warning(
                "Scrape timed out app=%s after %ss", ticket_app.name.value, timeout_seconds
            )
            outcome = NormalizeResult()
        elif isinstance(outcome, Exception):
            logger.warning(
                "Scrape failed app=%s: %s: %s",
                ticket_app.name.value,
                type(outcome).__name__,
                outcome,
            )
            outcome = NormalizeResult()
        elif isinstance(outcome, BaseException):
            raise outcome

        if not outcome.tickets:
            incomplete_apps.append(IncompleteTicketApp(ticket_app.name, ZERO_TICKETS_REASON))
        tickets.extend(outcome.tickets)
        failed_by_app[ticket_app.name] = outcome.failed_count
        logger.info(
            "Scrape done app=%s quantity=%s tickets=%s failed=%s",
            ticket_app.name.value,
            quantity,
            len(outcome.tickets),
            outcome.failed_count,
        )

    failed_tickets = [
        FailedTickets(ticket_app.name, failed_by_app.get(ticket_app.name, 0))
        for ticket_app in apps
    ]
    return AggregateResult(
        tickets=tickets,
        incomplete_apps=incomplete_apps,
        failed_tickets=failed_tickets,
    )
