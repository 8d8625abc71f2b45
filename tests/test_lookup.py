import httpx
import pytest

from schemas import LookupResult
from services.lookup import (
    GoogleBooksSource, LookupSource, MetadataResolver, OpenLibrarySource, build_resolver,
)

ISBN13 = "9780306406157"


def _resolver(client, api_key="", use_google_books=True):
    return build_resolver(client, api_key, use_google_books)


def _router(open_library=None, google=None, seen=None):
    """Handler answering Open Library and Google Books with the given callables."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.url.host == "openlibrary.org" and open_library:
            return open_library(request)
        if request.url.host == "www.googleapis.com" and google:
            return google(request)
        return httpx.Response(404)

    return handler


def _google_volume(title="Arithmetic", authors=("Hans Freudenthal",)):
    info = {"title": title} if title else {}
    if authors is not None:
        info["authors"] = list(authors)
    return lambda request: httpx.Response(200, json={"totalItems": 1, "items": [{"volumeInfo": info}]})


def test_open_library_hit_skips_google(mock_client) -> None:
    seen = []
    client = mock_client(_router(
        open_library=lambda r: httpx.Response(200, json={"title": "Arithmetic", "by_statement": "H. Freudenthal"}),
        google=_google_volume(),
        seen=seen,
    ))

    result = _resolver(client).lookup(ISBN13)

    assert result == LookupResult(title="Arithmetic", author="H. Freudenthal")
    assert [r.url.path for r in seen] == [f"/isbn/{ISBN13}.json"]


def test_open_library_title_without_author_is_a_hit(mock_client) -> None:
    client = mock_client(_router(
        open_library=lambda r: httpx.Response(200, json={"title": "Arithmetic"}),
        google=_google_volume(),
    ))
    assert _resolver(client).lookup(ISBN13) == LookupResult(title="Arithmetic", author="")


def test_isbn10_is_normalised_before_lookup(mock_client) -> None:
    seen = []
    client = mock_client(_router(
        open_library=lambda r: httpx.Response(200, json={"title": "Arithmetic"}),
        seen=seen,
    ))
    _resolver(client).lookup("0-306-40615-2")
    assert seen[0].url.path == f"/isbn/{ISBN13}.json"


@pytest.mark.parametrize(
    "open_library",
    [
        lambda r: httpx.Response(404),
        lambda r: httpx.Response(500, json={"title": "Server error page"}),
        lambda r: httpx.Response(200, text="<html>not json</html>"),
        lambda r: httpx.Response(200, json={"publishers": ["Someone"]}),
        lambda r: httpx.Response(200, json={"title": ""}),
        lambda r: httpx.Response(200, json=["a", "list"]),
    ],
)
def test_falls_back_to_google(mock_client, open_library) -> None:
    client = mock_client(_router(open_library=open_library, google=_google_volume()))
    assert _resolver(client).lookup(ISBN13) == LookupResult(title="Arithmetic", author="Hans Freudenthal")


def test_google_query_carries_isbn_and_key(mock_client) -> None:
    seen = []
    client = mock_client(_router(google=_google_volume(), seen=seen))

    _resolver(client, api_key="secret").lookup(ISBN13)

    google = [r for r in seen if r.url.host == "www.googleapis.com"][0]
    assert google.url.path == "/books/v1/volumes"
    assert google.url.params["q"] == f"isbn:{ISBN13}"
    assert google.url.params["maxResults"] == "1"
    assert google.url.params["key"] == "secret"


def test_google_query_without_key(mock_client) -> None:
    seen = []
    client = mock_client(_router(google=_google_volume(), seen=seen))
    _resolver(client).lookup(ISBN13)
    google = [r for r in seen if r.url.host == "www.googleapis.com"][0]
    assert "key" not in google.url.params


def test_google_first_author_only(mock_client) -> None:
    client = mock_client(_router(google=_google_volume(authors=("First", "Second"))))
    assert _resolver(client).lookup(ISBN13).author == "First"


def test_google_author_without_title_is_a_hit(mock_client) -> None:
    client = mock_client(_router(google=_google_volume(title="", authors=("Anon",))))
    assert _resolver(client).lookup(ISBN13) == LookupResult(title="", author="Anon")


def test_google_without_title_or_author_is_not_found(mock_client) -> None:
    client = mock_client(_router(google=_google_volume(title="", authors=None)))
    assert _resolver(client).lookup(ISBN13) is None


def test_google_without_items_is_not_found(mock_client) -> None:
    client = mock_client(_router(google=lambda r: httpx.Response(200, json={"totalItems": 0})))
    assert _resolver(client).lookup(ISBN13) is None


def test_both_sources_failing_is_not_found(mock_client) -> None:
    client = mock_client(_router(
        open_library=lambda r: httpx.Response(503),
        google=lambda r: httpx.Response(403, json={"error": {"code": 403}}),
    ))
    assert _resolver(client).lookup(ISBN13) is None


def test_network_errors_are_absorbed(mock_client) -> None:
    def handler(request):
        raise httpx.ConnectError("no route to host", request=request)

    assert _resolver(mock_client(handler)).lookup(ISBN13) is None


def test_google_disabled_by_readiness(mock_client) -> None:
    seen = []
    client = mock_client(_router(google=_google_volume(), seen=seen))

    resolver = _resolver(client, api_key="secret", use_google_books=False)

    assert resolver.lookup(ISBN13) is None
    assert all(r.url.host == "openlibrary.org" for r in seen)
    assert [s.name for s in resolver.active_sources()] == ["Open Library"]


def test_invalid_isbn_makes_no_requests(mock_client) -> None:
    seen = []
    client = mock_client(_router(seen=seen))
    assert _resolver(client).lookup("12345") is None
    assert seen == []


def test_extra_source_is_tried_last(mock_client) -> None:
    class Shelf(LookupSource):
        name = "Shelf"

        def fetch(self, client, isbn13):
            return LookupResult(title=f"Shelf copy of {isbn13}", author="")

    client = mock_client(_router())
    resolver = MetadataResolver(client, [OpenLibrarySource(), GoogleBooksSource(), Shelf()])

    assert resolver.lookup(ISBN13).title == f"Shelf copy of {ISBN13}"
