"""Shared contract for ticket resale app scrapers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


class TicketAppName(str, Enum):
    TICKPICK = "tickpick"
    GAMETIME = "gametime"


@dataclass(frozen=True)
class RawListing:
    """One listing card as text, before any parsing. Missing elements are None."""

    seat_text: str | None
    price_text: str | None
    link: str | None


@dataclass(frozen=True)
class ScrapeTicketsResult:
    raw_listings: list[RawListing] = field(default_factory=list)
    # Cards the scraper could not read at all (no seat and no price element).
    failed_count: int = 0


@dataclass(frozen=True)
class ScrapedTicket:
    """A validated ticket that has not been persisted yet."""

    section: int
    row: int
    price: int
    quantity: int
    app: TicketAppName
    link: str


class TicketApp(Protocol):
    name: TicketAppName

    def scrape_event_urls(self) -> list[str]:
        """Return candidate event page URLs for the tracked team."""
        ...

    def scrape_tickets(self, event_url: str, quantity: int) -> ScrapeTicketsResult:
        """Return the raw listings shown on an event page for a ticket quantity."""
        ...
