"""Gametime event page scraper."""

from __future__ import annotations

import logging
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

import requests
from bs4 import BeautifulSoup

from tickettrack.ticket_apps.base import RawListing, ScrapeTicketsResult, TicketAppName
from tickettrack.ticket_apps.http import build_session, fetch_html

logger = logging.getLogger(__name__)

HOME_PAGE_URL = "https://gametime.co"

_CARD_MODULE = "pages-Event-components-ListingCard-ListingCard-module"
CARD_SELECTOR = f".{_CARD_MODULE}__listing-card-container"
SEAT_SELECTOR = f".{_CARD_MODULE}__seat-details-row"
PRICE_SELECTOR = f".{_CARD_MODULE}__price-info"
LINK_SELECTOR = f"a.{_CARD_MODULE}__listing-card"

_KNOWN_EVENT_PATHS = (
    "/nba-basketball/detroit-pistons-at-boston-celtics-tickets/12-12-2024-boston-ma-td-garden/events/66bf5fd00109394f0ebeb7d7",
    "/nba-basketball/bulls-at-celtics-tickets/12-19-2024-boston-ma-td-garden/events/66be5ccf7514c0d1631d2a79",
    "/nba-basketball/76-ers-at-celtics-tickets/12-25-2024-boston-ma-td-garden/events/66b6b97a442e7e398be5eb53",
    "/nba-basketball/pacers-at-celtics-tickets/12-27-2024-boston-ma-td-garden/events/66be5d253ede6703176ffac8",
    "/nba-basketball/pacers-at-celtics-tickets/12-29-2024-boston-ma-td-garden/events/66be5d3e6c4f21420654405c",
)


def listing_page_url(event_url: str, quantity: int) -> str:
    """Event URL with all-in pricing and the quantity filter selected."""
    parts = urlsplit(event_url)
    params = dict(parse_qsl(parts.query))
    params["quantity"] = str(quantity)
    params["allInPricing"] = "true"
    return urlunsplit(parts._replace(query=urlencode(params)))


def _price_text(price_info) -> str | None:
    # The displayed price is the last child; earlier children hold strike-through prices.
    children = price_info.find_all(recursive=False)
    target = children[-1] if children else price_info
    text = target.get_text(strip=True)
    return text or None


def parse_listings(html: str, page_url: str) -> ScrapeTicketsResult:
    soup = BeautifulSoup(html, "html.parser")
    raw_listings: list[RawListing] = []
    unreadable = 0

    for card in soup.select(CARD_SELECTOR):
        seat = card.select_one(SEAT_SELECTOR)
        price = card.select_one(PRICE_SELECTOR)
        if seat is None and price is None:
            unreadable += 1
            continue

        anchor = card.select_one(LINK_SELECTOR)
        href = anchor.get("href") if anchor is not None else None
        raw_listings.append(
            RawListing(
                seat_text=seat.get_text(" ", strip=True) if seat is not None else None,
                price_text=_price_text(price) if price is not None else None,
                link=urljoin(page_url, href) if href else page_url,
            )
        )

    return ScrapeTicketsResult(raw_listings=raw_listings, failed_count=unreadable)


class GametimeApp:
    name = TicketAppName.GAMETIME

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
            "Gametime scrape url=%s quantity=%s listings=%s unreadable=%s",
            event_url,
            quantity,
            len(result.raw_listings),
            result.failed_count,
        )
        return result
