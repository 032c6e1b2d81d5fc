"""
HTTP and HTML helpers shared by the package and asset crawlers.

Every request goes through :func:`fetch`, which bounds the call with a
timeout and retries transient failures with exponential backoff.  A 404 is
permanent and fails straight away.
"""

import logging
import time

import requests
from bs4 import BeautifulSoup

from .errors import ParseError, TransportError

log = logging.getLogger(__name__)

_MAX_BACKOFF = 30.0


def fetch(
    session: requests.Session,
    url: str,
    *,
    timeout: float = 30.0,
    retries: int = 3,
    backoff: float = 0.5,
) -> requests.Response:
    """
    GET *url* and return the response, or raise :class:`TransportError`.

    Network errors and HTTP error statuses are retried up to *retries*
    attempts in total, sleeping ``backoff * 2 ** attempt`` seconds (capped at
    30s) between attempts.
    """
    last_exc: Exception | None = None
    attempts = max(retries, 1)

    for attempt in range(attempts):
        try:
            resp = session.get(url, timeout=timeout)
        except requests.RequestException as exc:
            last_exc = exc
        else:
            if resp.status_code == 404:
                raise TransportError(url, requests.HTTPError("404 Not Found", response=resp))
            try:
                resp.raise_for_status()
            except requests.HTTPError as exc:
                last_exc = exc
            else:
                return resp

        if attempt < attempts - 1:
            wait = min(backoff * 2 ** attempt, _MAX_BACKOFF)
            log.warning(
                "Fetch failed (attempt %d/%d) for %s: %s, retrying in %.1fs",
                attempt + 1, attempts, url, last_exc, wait,
            )
            time.sleep(wait)

    raise TransportError(url, last_exc)


def parse_html(markup: str | bytes, source: str) -> BeautifulSoup:
    """Parse *markup* with lxml, wrapping parser failures in :class:`ParseError`."""
    try:
        return BeautifulSoup(markup, "lxml")
    except Exception as exc:  # noqa: BLE001
        raise ParseError(source, exc) from exc


def fetch_html(
    session: requests.Session,
    url: str,
    *,
    timeout: float = 30.0,
    retries: int = 3,
    backoff: float = 0.5,
) -> BeautifulSoup:
    """Fetch *url* and return its parsed document."""
    resp = fetch(session, url, timeout=timeout, retries=retries, backoff=backoff)
    return parse_html(resp.content, url)
