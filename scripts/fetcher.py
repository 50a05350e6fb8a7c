"""
JSON fetcher for the campaign catalog and per-campaign stats exports.

One GET per call, no retries, no caching and no timeout beyond the
transport default.
"""

import logging
from typing import Any, Optional
from urllib.parse import urlparse

import requests

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when a JSON resource cannot be retrieved or parsed."""

    def __init__(self, url: str, cause: BaseException):
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to fetch {url}: {cause}")


def _check_url(url: str) -> None:
    parsed = urlparse(url or "")
    if parsed.scheme != "https" or not parsed.netloc:
        raise FetchError(url, ValueError("expected an absolute https:// URL"))


def fetch_json(url: str, session: Optional[requests.Session] = None) -> Any:
    """
    Download *url* and decode its body as JSON.

    A non-2xx status is not treated as a failure here: the body is still
    parsed, and it is the parse that decides. Transport errors and invalid
    JSON raise FetchError carrying the URL and the underlying cause.
    """
    _check_url(url)
    http = session or requests

    try:
        response = http.get(url)
    except requests.exceptions.RequestException as e:
        raise FetchError(url, e) from e

    if not response.ok:
        logger.debug(f"{url} answered HTTP {response.status_code}, parsing body anyway")

    try:
        return response.json()
    except ValueError as e:
        raise FetchError(url, e) from e
