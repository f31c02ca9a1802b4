"""In-memory ring buffer of recent service log records, served at /api/logs."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

SERVICE_LOGGERS = (
    "tickettrack.main",
    "tickettrack.store",
    "tickettrack.tickets.aggregate",
    "tickettrack.tickets.reconcile",
    "tickettrack.tickets.refresh",
    "tickettrack.ticket_apps.tickpick",
    "tickettrack.ticket_apps.gametime",
    "tickettrack.ingestion.sync",
    "tickettrack.ingestion.schedule_client",
)


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    level: str
    levelno: int
    logger: str
    message: str


class BufferHandler(logging.Handler):
    """Keeps the last *maxlen* records for the activity log."""

    def __init__(self, maxlen: int = 200) -> None:
        super().__init__()
        self._buffer: deque[LogEntry] = deque(maxlen=maxlen)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = LogEntry(
                timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc)
                .strftime("%Y-%m-%d %H:%M:%S UTC"),
                level=record.levelname,
                levelno=record.levelno,
                logger=record.name,
                message=self.format(record),
            )
            self._buffer.append(entry)
        except Exception:
            self.handleError(record)

    def entries(self, limit: int = 100, min_level: int = logging.NOTSET) -> list[dict]:
        """Most recent entries at or above *min_level*, newest first."""
        items = [entry for entry in self._buffer if entry.levelno >= min_level][-limit:]
        items.reverse()
        return [asdict(entry) for entry in items]


_handler: BufferHandler | None = None


def get_buffer_handler() -> BufferHandler:
    global _handler
    if _handler is None:
        _handler = BufferHandler(maxlen=200)
        _handler.setFormatter(logging.Formatter("%(message)s"))
        _handler.setLevel(logging.DEBUG)
    return _handler


def install_buffer_handler() -> BufferHandler:
    handler = get_buffer_handler()
    for name in SERVICE_LOGGERS:
        service_logger = logging.getLogger(name)
        if handler not in service_logger.handlers:
            service_logger.addHandler(handler)
        service_logger.setLevel(logging.INFO)
    return handler
