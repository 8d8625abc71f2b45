# services/http_client.py — one attempt per request, failures become None/False
import logging
from typing import Any, Dict, Optional

import httpx

from config import LOOKUP_TIMEOUT, USER_AGENT

logger = logging.getLogger(__name__)


def make_client(timeout: float = LOOKUP_TIMEOUT) -> httpx.Client:
    return httpx.Client(
        timeout=timeout,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
    )


def _get(client: httpx.Client, url: str, params: Optional[Dict[str, str]]) -> Optional[httpx.Response]:
    try:
        r = client.get(url, params=params)
    except httpx.HTTPError as e:
        logger.debug("GET %s failed: %s", url, e)
        return None
    if not r.is_success:
        logger.debug("GET %s returned %s", url, r.status_code)
        return None
    return r


def get_ok(client: httpx.Client, url: str, params: Optional[Dict[str, str]] = None) -> bool:
    """True on any 2xx response."""
    return _get(client, url, params) is not None


def get_json(client: httpx.Client, url: str, params: Optional[Dict[str, str]] = None) -> Optional[Any]:
    """Decoded body of a 2xx response, or None for network, status or JSON errors."""
    r = _get(client, url, params)
    if r is None:
        return None
    try:
        return r.json()
    except ValueError as e:
        logger.debug("GET %s returned malformed JSON: %s", url, e)
        return None
