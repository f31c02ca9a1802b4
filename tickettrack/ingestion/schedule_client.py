"""HTTP client for team schedule feeds."""

from __future__ import annotations

import json
import logging
import time
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from tickettrack.ingestion.teams import get_team

logger = logging.getLogger(__name__)
DEFAULT_TIMEOUT_SECONDS = 12
DEFAULT_RETRIES = 3
DEFAULT_BACKOFF_SECONDS = 0.5
DEFAULT_USER_AGENT = "tickettrack/1.0 (+https://example.local)"


def fetch_schedule(team_key: str) -> dict:
    """Fetch the season schedule JSON for a team.

    Returns parsed JSON on success. On failure, returns a controlled error dict.
    """

    try:
        team = get_team(team_key)
    except ValueError as exc:
        return {"ok": False, "error": str(exc), "team": team_key}

    url = team.schedule_url
    headers = {
        "User-Agent": DEFAULT_USER_AGENT,
        "Accept": "application/json",
    }

    last_error: str | None = None
    last_status: int | None = None
    for attempt in range(DEFAULT_RETRIES):
        try:
            request = Request(url, headers=headers)
            with urlopen(request, timeout=DEFAULT_TIMEOUT_SECONDS) as response:
                status = getattr(response, "status", None)
                payload = response.read().decode("utf-8")
                if status and status != 200:
                    logger.error(
                        "Schedule feed non-200 team=%s status=%s body=%s",
                        team.key,
                        status,
                        payload[:300],
                    )
                    return {
                        "ok": False,
                        "error": "Schedule feed returned non-200 response",
                        "status": status,
                        "team": team.key,
                        "url": url,
                    }
                return json.loads(payload)
        except HTTPError as exc:
            last_status = exc.code
            last_error = str(exc)
            logger.error("Schedule feed HTTPError team=%s status=%s", team.key, last_status)
            if attempt < DEFAULT_RETRIES - 1:
                time.sleep(DEFAULT_BACKOFF_SECONDS * (2**attempt))
        except (URLError, TimeoutError, json.JSONDecodeError) as exc:
            last_error = str(exc)
            if attempt < DEFAULT_RETRIES - 1:
                time.sleep(DEFAULT_BACKOFF_SECONDS * (2**attempt))

    return {
        "ok": False,
        "error": "Failed to fetch team schedule",
        "details": last_error,
        "status": last_status,
        "team": team.key,
        "url": url,
    }
