"""TickPick event page scraper."""

from __future__ import annotations

import logging
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests
from bs4 import BeautifulSoup

from tickettrack.ticket_apps.base import RawListing, ScrapeTicketsResult, TicketAppName
from tickettrack.ticket_apps.http import build_session, fetch_html

logger = logging.getLogger(__name__)

HOME_PAGE_URL = "https://www.tickpick.com"
LISTING_SELECTOR = ".listing"
SEAT_SELECTOR = ".sout span"
PRICE_SELECTOR = "label > b"

_KNOWN_EVENT_PATHS = (
    "/buy-boston-celtics-vs-detroit-pistons-tickets-td-garden-12-12-24-7pm/6637544/",
    "/buy-boston-celtics-vs-chicago-bulls-tickets-td-garden-12-19-24-7pm/6633509/",
    "/buy-boston-celtics-vs-philadelphia-76ers-tickets-td-garden-12-25-24-5pm/6620096/",
    "/buy-boston-celtics-vs-indiana-pacers-tickets-td-garden-12-27-24-7pm/6633517/",
    "/buy-boston-celtics-vs-indiana-pacers-tickets-td-garden-12-29-24-6pm/6633518/",
    "/buy-boston-celtics-vs-toronto-raptors-tickets-td-garden-12-31-24-3pm/6633521/",
    "/buy-boston-celtics-vs-sacramento-kings-tickets-td-garden-1-10-25-7pm/6633524/",
    "/buy-boston-celtics-vs-new-orleans-pelicans-tickets-td-garden-1-12-25-6pm/6633525/",
    "/buy-boston-celtics-vs-orlando-magic-tickets-td-garden-1-17-25-7pm/6633527/",
    "/buy-boston-celtics-vs-atlanta-hawks-tickets-td-garden-1-18-25-7pm/6633529/",
)


def listing_page_url(event_url: str, quantity: int) -> str:
    """Event URL with TickPick's quantity filter and price sort applied."""
    parts = urlsplit(event_url)
    params = dict(parse_qsl(parts.query))
    params["sortType"] = "P"
    params["qty"] = f"{quantity}-false"
    return urlunsplit(parts._replace(query=urlencode(params)))


def parse_listings(html: str, page_url: str) -> ScrapeTicketsResult:
    soup = BeautifulSoup(html, "html.parser")
    raw_listings: list[RawListing] = []
    unreadable = 0

    for element in soup.select(LISTING_SELECTOR):
        seat = element.select_one(SEAT_SELECTOR)
        price = element.select_one(PRICE_SELECTOR)
        if seat is None and price is None:
            unreadable += 1
            continue
        raw_listings.append(
            RawListing(
                seat_text=seat.get_text(" ", strip=True) if seat is not None else None,
                price_text=price.get_text(strip=True) if price is not None else None,
                # TickPick has no per-listing link.
                link=page_url,
            )
        )

    return ScrapeTicketsResult(raw_listings=raw_listings, failed_count=unreadable)


class TickPickApp:
    name = TicketAppName.TICKPICK

    def __init__(self, session: requests.Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = build_session()
        return self._session

    def scrape_event_urls(self) -> list[str]:
        # Known event pages; the team listing page is not crawled.
        return [f"{HOME_PAGE_URL}{path}" for path in _KNOWN_EVENT_PATHS]

    def scrape_tickets(self, event_url: str, quantity: int) -> ScrapeTicketsResult:
        html = fetch_html(self.session, listing_page_url(event_url, quantity))
        result = parse_listings(html, event_url)
        logger.info(
            "TickPick scrape url=%s quantity=%s listings=%s unreadable=%s",
            event_url,
            quantity,
            len(result.raw_listings),
            result.failed_count,
        )
        return result
