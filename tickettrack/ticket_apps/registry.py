"""Supported ticket resale apps, keyed by name."""

from __future__ import annotations

import logging

from tickettrack.ticket_apps.base import TicketApp, TicketAppName
from tickettrack.ticket_apps.gametime import GametimeApp
from tickettrack.ticket_apps.tickpick import TickPickApp

logger = logging.getLogger(__name__)

# Registration order is the scrape and merge order.
TICKET_APPS: dict[TicketAppName, TicketApp] = {
    TicketAppName.TICKPICK: TickPickApp(),
    TicketAppName.GAMETIME: GametimeApp(),
}


def get_ticket_app(name: TicketAppName | str) -> TicketApp:
    """Return the registered app for a name.

    Raises ValueError for names outside TicketAppName.
    """

    try:
        key = TicketAppName(name)
    except ValueError as exc:
        supported = ", ".join(app.value for app in TICKET_APPS)
        raise ValueError(f"Unsupported ticket app: {name}. Supported: {supported}") from exc
    return TICKET_APPS[key]


def parse_ticket_apps(raw: str) -> list[TicketAppName]:
    """Parse a comma separated list, dropping unknown names with an error log."""
    supported = {app.value for app in TicketAppName}
    names = [name.strip().lower() for name in raw.split(",") if name.strip()]
    valid = [TicketAppName(name) for name in names if name in supported]
    invalid = [name for name in names if name not in supported]
    if invalid:
        logger.error(
            "Ignoring unsupported ticket apps: %s. Supported: %s",
            ", ".join(invalid),
            ", ".join(app.value for app in TICKET_APPS),
        )
    return valid
