"""Shared helpers for the test modules: in-memory database and stub ticket apps."""

from __future__ import annotations

import time
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tickettrack.db import Base
from tickettrack.models import Game
from tickettrack.ticket_apps.base import RawListing, ScrapeTicketsResult, TicketAppName


def make_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def make_game(**overrides) -> Game:
    values = {
        "home_team": "Boston Celtics",
        "away_team": "Detroit Pistons",
        "start_time": datetime(2026, 12, 12, 0, 0, tzinfo=timezone.utc),
        "venue": "TD Garden",
        "city": "Boston",
        "state": "MA",
    }
    values.update(overrides)
    return Game(**values)


def tickpick_listing(section: int, row: int, price: str) -> RawListing:
    return RawListing(
        seat_text=f"Section {section} • Row {row}",
        price_text=price,
        link="https://www.tickpick.com/buy-event/1/",
    )


def gametime_listing(section: int, row: int | str, price: str) -> RawListing:
    return RawListing(
        seat_text=f"{section}, Row {row}",
        price_text=price,
        link=f"https://gametime.co/listings/{section}-{row}",
    )


class StubTicketApp:
    def __init__(
        self,
        name: TicketAppName,
        listings: list[RawListing] | None = None,
        error: Exception | None = None,
        delay_seconds: float = 0,
        unreadable: int = 0,
    ) -> None:
        self.name = name
        self.listings = listings or []
        self.error = error
        self.delay_seconds = delay_seconds
        self.unreadable = unreadable
        self.calls: list[tuple[str, int]] = []

    def scrape_event_urls(self) -> list[str]:
        return [f"https://example.test/{self.name.value}/event"]

    def scrape_tickets(self, event_url: str, quantity: int) -> ScrapeTicketsResult:
        self.calls.append((event_url, quantity))
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return ScrapeTicketsResult(raw_listings=list(self.listings), failed_count=self.unreadable)
