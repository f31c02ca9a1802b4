"""HTTP session and page fetch shared by the ticket app scrapers."""

from __future__ import annotations

import logging

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 25
DEFAULT_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 0.8
MAX_ERROR_SNIPPET = 300
DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.7",
    "Cache-Control": "no-cache",
}


class TicketAppFetchError(RuntimeError):
    pass


def build_session(
    *,
    retries: int = DEFAULT_RETRIES,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
) -> requests.Session:
    """Create a session that retries transient failures with backoff."""
    session = requests.Session()
    session.headers.update(DEFAULT_HEADERS)

    retry = Retry(
        total=retries,
        read=retries,
        connect=retries,
        status=retries,
        backoff_factor=backoff_factor,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset(["GET", "HEAD"]),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def looks_like_bot_check(html: str) -> bool:
    if not html:
        return True
    lowered = html.lower()
    return ("just a moment" in lowered and "cloudflare" in lowered) or (
        "verifying you are human" in lowered
    )


def fetch_html(
    session: requests.Session,
    url: str,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> str:
    try:
        response = session.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise TicketAppFetchError(f"GET failed for {url}: {exc}") from exc

    if response.status_code >= 400:
        snippet = (response.text or "")[:MAX_ERROR_SNIPPET]
        logger.error("Ticket app page status=%s url=%s body=%s", response.status_code, url, snippet)
        raise TicketAppFetchError(f"GET {url} returned status={response.status_code}")

    html = response.text
    if looks_like_bot_check(html):
        raise TicketAppFetchError(f"Bot check page returned for {url}")
    return html
