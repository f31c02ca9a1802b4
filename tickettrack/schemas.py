from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, AnyHttpUrl, BaseModel, Field

from tickettrack.ticket_apps.base import TicketAppName


def _ensure_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


TicketQuantity = Annotated[int, Field(ge=1, le=20)]
UtcDatetime = Annotated[datetime, AfterValidator(_ensure_utc)]


class TicketOut(BaseModel):
    id: int
    section: int
    row: int
    price: int
    quantity: int
    app: TicketAppName
    link: str

    class Config:
        from_attributes = True


class TicketAppUrlOut(BaseModel):
    app: TicketAppName
    event_url: str

    class Config:
        from_attributes = True


class TicketQuantityGroupOut(BaseModel):
    quantity: int
    last_updated: Optional[UtcDatetime]
    tickets: list[TicketOut]

    class Config:
        from_attributes = True


class GameOut(BaseModel):
    id: int
    home_team: str
    away_team: str
    start_time: UtcDatetime
    venue: str
    city: str
    state: str
    ticket_app_urls: list[TicketAppUrlOut]
    ticket_quantity_groups: list[TicketQuantityGroupOut]

    class Config:
        from_attributes = True


class GamesResponse(BaseModel):
    games: list[GameOut]
    count: int


class AddHomeGamesRequest(BaseModel):
    team: str


class AddHomeGamesResponse(BaseModel):
    message: str
    team: str
    new_games: list[GameOut]


class AddTicketAppUrlRequest(BaseModel):
    app: TicketAppName
    ticket_app_url: AnyHttpUrl


class RefreshTicketsRequest(BaseModel):
    # Falls back to the default_ticket_quantity setting when omitted.
    ticket_quantity: Optional[TicketQuantity] = None


class IncompleteTicketAppOut(BaseModel):
    app: TicketAppName
    reason: str

    class Config:
        from_attributes = True


class FailedTicketsOut(BaseModel):
    app: TicketAppName
    failed_count: int

    class Config:
        from_attributes = True


class RefreshTicketsResponse(BaseModel):
    scraped_at: UtcDatetime
    success_count: int
    failed_tickets: list[FailedTicketsOut]
    incomplete_apps: list[IncompleteTicketAppOut]
    game: GameOut


class RankedTicketsResponse(BaseModel):
    game_id: int
    ticket_quantity: int
    last_updated: Optional[UtcDatetime]
    cheapest: Optional[list[TicketOut]] = None
    best_value: Optional[list[TicketOut]] = None


class ScrapeTicketsRequest(BaseModel):
    url: AnyHttpUrl
    ticket_quantity: TicketQuantity


class ScrapedTicketOut(BaseModel):
    section: int
    row: int
    price: int
    quantity: int
    app: TicketAppName
    link: str

    class Config:
        from_attributes = True


class ScrapeTicketsResponse(BaseModel):
    app: TicketAppName
    tickets: list[ScrapedTicketOut]
    failed_count: int


class EventUrlsResponse(BaseModel):
    app: TicketAppName
    event_urls: list[str]


class SettingsOut(BaseModel):
    scrape_timeout_seconds: int
    default_ticket_quantity: int
    auto_ingest_enabled: bool
    enabled_ticket_apps: list[TicketAppName]
    updated_at_utc: Optional[UtcDatetime]


class SettingsUpdate(BaseModel):
    scrape_timeout_seconds: Optional[int] = None
    default_ticket_quantity: Optional[int] = Field(default=None, ge=1, le=20)
    auto_ingest_enabled: Optional[bool] = None
    enabled_ticket_apps: Optional[list[TicketAppName]] = None
