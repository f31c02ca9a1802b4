"""Turn raw listing text from a ticket app into validated tickets.

Each app prints the seat differently:

- TickPick: ``Section 305 • Row 12``
- Gametime: ``305, Row 12`` (rows may also be letters, which are rejected)

Prices look like ``$88``, ``$1,204`` or ``$88/ea``. A listing becomes a ticket
only when section, row and price all parse; anything else is counted as a
failure and never raised.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from tickettrack.ticket_apps.base import RawListing, ScrapedTicket, TicketAppName

SEAT_PATTERNS: dict[TicketAppName, re.Pattern[str]] = {
    TicketAppName.TICKPICK: re.compile(r"Section\s+(\d+)\s*•\s*Row\s+(\d+)"),
    TicketAppName.GAMETIME: re.compile(r"(\d+),\s*Row\s+(\d+|[A-Z])"),
}
PRICE_RE = re.compile(r"^\$?\s*(\d[\d,]*)(?:\.\d+)?\s*(?:/\s*ea)?$", re.IGNORECASE)


@dataclass(frozen=True)
class NormalizeResult:
    tickets: tuple[ScrapedTicket, ...] = ()
    failed_count: int = 0


def _positive_int(value: str) -> int | None:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def parse_seat(app: TicketAppName, seat_text: str | None) -> tuple[int, int] | None:
    if not seat_text:
        return None
    match = SEAT_PATTERNS[app].search(seat_text)
    if not match:
        return None
    section = _positive_int(match.group(1))
    row = _positive_int(match.group(2))
    if section is None or row is None:
        return None
    return section, row


def parse_price(price_text: str | None) -> int | None:
    """Return whole dollars; cents are truncated."""
    if not price_text:
        return None
    match = PRICE_RE.match(price_text.strip())
    if not match:
        return None
    return int(match.group(1).replace(",", ""))


def normalize_listing(
    app: TicketAppName,
    seat_text: str | None,
    price_text: str | None,
    link: str | None,
    quantity: int,
) -> ScrapedTicket | None:
    if quantity < 1:
        raise ValueError(f"quantity must be >= 1, got {quantity}")

    seat = parse_seat(app, seat_text)
    price = parse_price(price_text)
    if seat is None or price is None or not link:
        return None

    section, row = seat
    return ScrapedTicket(
        section=section,
        row=row,
        price=price,
        quantity=quantity,
        app=app,
        link=link,
    )


def normalize_listings(
    app: TicketAppName,
    raw_listings: Iterable[RawListing],
    quantity: int,
) -> NormalizeResult:
    normalized = [
        normalize_listing(app, listing.seat_text, listing.price_text, listing.link, quantity)
        for listing in raw_listings
    ]
    tickets = tuple(ticket for ticket in normalized if ticket is not None)
    return NormalizeResult(tickets=tickets, failed_count=len(normalized) - len(tickets))
