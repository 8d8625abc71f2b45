# services/lookup.py — ordered fallback: Open Library first, then Google Books
import logging
from typing import Any, List, Optional, Sequence

import httpx

from config import GOOGLE_BOOKS_URL, OPEN_LIBRARY_URL
from schemas import LookupResult
from services.http_client import get_json
from services.isbn_utils import normalize

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


class LookupSource:
    """One bibliographic service. `fetch` never raises; "nothing found" is None."""

    name = ""
    # Sources that are only used when the startup probe found them ready
    requires_readiness = False

    def fetch(self, client: httpx.Client, isbn13: str) -> Optional[LookupResult]:
        raise NotImplementedError


class OpenLibrarySource(LookupSource):
    name = "Open Library"

    def __init__(self, base_url: str = OPEN_LIBRARY_URL) -> None:
        self.base_url = base_url.rstrip("/")

    def fetch(self, client: httpx.Client, isbn13: str) -> Optional[LookupResult]:
        data = get_json(client, f"{self.base_url}/isbn/{isbn13}.json")
        if not isinstance(data, dict):
            return None
        title = _text(data.get("title"))
        if not title:
            return None
        # by_statement is often missing; an empty author is still a hit
        return LookupResult(title=title, author=_text(data.get("by_statement")))


class GoogleBooksSource(LookupSource):
    name = "Google Books"
    requires_readiness = True

    def __init__(self, api_key: str = "", base_url: str = GOOGLE_BOOKS_URL) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    def fetch(self, client: httpx.Client, isbn13: str) -> Optional[LookupResult]:
        params = {"q": f"isbn:{isbn13}", "maxResults": "1"}
        if self.api_key:
            params["key"] = self.api_key
        data = get_json(client, f"{self.base_url}/volumes", params)
        if not isinstance(data, dict):
            return None
        items = data.get("items")
        if not isinstance(items, list) or not items or not isinstance(items[0], dict):
            return None
        info = items[0].get("volumeInfo")
        if not isinstance(info, dict):
            return None

        title = _text(info.get("title"))
        authors = info.get("authors")
        author = _text(authors[0]) if isinstance(authors, list) and authors else ""
        if not (title or author):
            return None
        return LookupResult(title=title, author=author)


class MetadataResolver:
    def __init__(
        self,
        client: httpx.Client,
        sources: Sequence[LookupSource],
        use_google_books: bool = True,
    ) -> None:
        self.client = client
        self.sources: List[LookupSource] = list(sources)
        # Decided once by the startup probe and left alone afterwards
        self.use_google_books = use_google_books

    def active_sources(self) -> List[LookupSource]:
        return [s for s in self.sources if self.use_google_books or not s.requires_readiness]

    def lookup(self, raw_isbn: str) -> Optional[LookupResult]:
        isbn13 = normalize(raw_isbn)
        if not isbn13:
            return None
        for source in self.active_sources():
            result = source.fetch(self.client, isbn13)
            if result is not None:
                logger.info("%s found %s: %s", source.name, isbn13, result.title or "(no title)")
                return result
            logger.info("%s had nothing for %s", source.name, isbn13)
        return None


def build_resolver(client: httpx.Client, api_key: str, use_google_books: bool) -> MetadataResolver:
    return MetadataResolver(
        client,
        [OpenLibrarySource(), GoogleBooksSource(api_key)],
        use_google_books=use_google_books,
    )
