# services/readiness.py — one-time startup checks for the lookup services
import logging
from dataclasses import dataclass
from typing import Any, List

import httpx

from config import CONNECTIVITY_URL, GOOGLE_BOOKS_URL, OPEN_LIBRARY_URL
from services.http_client import get_json, get_ok

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReadinessReport:
    internet: bool
    api_key_present: bool
    google_books: bool
    open_library: bool

    @property
    def needs_decision(self) -> bool:
        """Google Books is unusable but Open Library works: continue or abort is the operator's call."""
        return self.internet and self.open_library and not self.google_books

    def steps(self) -> List[tuple]:
        return [
            ("Connecting to the internet…", self.internet),
            ("Getting the Google API key…", self.api_key_present),
            ("Contacting Google Books API…", self.google_books),
            ("Connecting to Open Library…", self.open_library),
        ]

    def summary_lines(self) -> List[str]:
        lines = [f"{what:<36}{'Passed!' if ok else 'FAILED'}" for what, ok in self.steps()]
        if not self.internet:
            lines.append("No internet connection. You can continue but ISBN lookup will be manual.")
        elif not self.google_books and not self.open_library:
            lines.append(
                "Neither Google Books nor Open Library is reachable right now. "
                "You can continue without online lookup, or exit and fix your network."
            )
        elif self.needs_decision:
            lines.append("Google Books is not ready (key/network). Open Library is available.")
        return lines


def _has_error(payload: Any) -> bool:
    if isinstance(payload, dict):
        return "error" in payload or any(_has_error(v) for v in payload.values())
    if isinstance(payload, list):
        return any(_has_error(v) for v in payload)
    return False


def google_books_ready(client: httpx.Client, api_key: str, base_url: str = GOOGLE_BOOKS_URL) -> bool:
    """Key is set and a tiny authorised query comes back 2xx, as JSON, without an error."""
    if not api_key:
        return False
    params = {
        "q": "isbn:0000000000000",
        "maxResults": "1",
        "fields": "totalItems",
        "key": api_key,
    }
    payload = get_json(client, f"{base_url.rstrip('/')}/volumes", params)
    if payload is None:
        return False
    return not _has_error(payload)


def probe_services(
    client: httpx.Client,
    api_key: str,
    connectivity_url: str = CONNECTIVITY_URL,
    open_library_url: str = OPEN_LIBRARY_URL,
    google_books_url: str = GOOGLE_BOOKS_URL,
) -> ReadinessReport:
    internet = get_ok(client, connectivity_url)
    key_present = bool(api_key)
    google = internet and key_present and google_books_ready(client, api_key, google_books_url)
    open_library = internet and get_ok(client, f"{open_library_url.rstrip('/')}/")

    report = ReadinessReport(
        internet=internet,
        api_key_present=key_present,
        google_books=google,
        open_library=open_library,
    )
    for line in report.summary_lines():
        logger.info(line)
    return report


def should_abort(report: ReadinessReport, require_google_books: bool) -> bool:
    """Only the Google-unready/Open-Library-ready case offers an abort; every other outcome continues."""
    return report.needs_decision and require_google_books
