from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from tickettrack.models import AppSettings
from tickettrack.ticket_apps.base import TicketApp, TicketAppName
from tickettrack.ticket_apps.registry import TICKET_APPS, parse_ticket_apps

logger = logging.getLogger(__name__)

MIN_SCRAPE_TIMEOUT_SECONDS = 5
MAX_SCRAPE_TIMEOUT_SECONDS = 600


@dataclass(frozen=True)
class SettingsSnapshot:
    scrape_timeout_seconds: int
    default_ticket_quantity: int
    auto_ingest_enabled: bool
    enabled_ticket_apps: tuple[TicketAppName, ...]


def _default_settings() -> AppSettings:
    return AppSettings(
        id=1,
        scrape_timeout_seconds=90,
        default_ticket_quantity=2,
        auto_ingest_enabled=True,
        enabled_ticket_apps=",".join(app.value for app in TICKET_APPS),
        updated_at_utc=datetime.now(timezone.utc),
    )


def get_or_create_settings(db) -> AppSettings:
    settings = db.query(AppSettings).filter(AppSettings.id == 1).one_or_none()
    if settings:
        return settings
    settings = _default_settings()
    db.add(settings)
    db.commit()
    db.refresh(settings)
    return settings


def snapshot_settings(settings: AppSettings) -> SettingsSnapshot:
    return SettingsSnapshot(
        scrape_timeout_seconds=settings.scrape_timeout_seconds,
        default_ticket_quantity=settings.default_ticket_quantity,
        auto_ingest_enabled=settings.auto_ingest_enabled,
        enabled_ticket_apps=tuple(parse_ticket_apps(settings.enabled_ticket_apps or "")),
    )


def clamp_scrape_timeout(value: int) -> int:
    return max(MIN_SCRAPE_TIMEOUT_SECONDS, min(MAX_SCRAPE_TIMEOUT_SECONDS, value))


def enabled_ticket_apps(snapshot: SettingsSnapshot) -> list[TicketApp]:
    """Registered apps that are switched on, in registration order."""
    if not snapshot.enabled_ticket_apps:
        logger.warning("No ticket apps enabled in settings; refreshes will find no tickets.")
    return [app for name, app in TICKET_APPS.items() if name in snapshot.enabled_ticket_apps]
