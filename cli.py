# cli.py — console front end for the reading tracker
import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

import config
import schemas
from crud.book import (
    add_book, delete_book, get_book, list_books, search_books, update_progress, update_status,
)
from crud.csv_io import export_csv, import_csv
from crud.setting import get_daily_rate, set_daily_rate
from database import init_db, make_engine
from models import Status
from services.http_client import make_client
from services.isbn_utils import normalize
from services.lookup import build_resolver
from services.progress import days_to_finish, derive_status, percent_complete
from services.readiness import ReadinessReport, probe_services, should_abort

logger = logging.getLogger(__name__)

OK, FAILED, BAD_INPUT = 0, 1, 2


def _db_url(value: str) -> str:
    return value if "://" in value else f"sqlite:///{value}"


def _open_session(url: str) -> Session:
    engine = make_engine(url)
    init_db(engine)
    return sessionmaker(engine, expire_on_commit=False)()


def _status_arg(text: str) -> Status:
    status = Status.parse(text)
    if status is None:
        raise argparse.ArgumentTypeError(f"unknown status {text!r} (to-read, reading, finished)")
    return status


def _print_books(books: List[schemas.Book], daily_rate: int) -> None:
    if not books:
        print("(no books)")
        return
    print(f"{'ID':<5}{'Title':<35}{'Author':<22}{'Progress':>13} {'% Done':>7}  {'ETA':<6}{'Status':<10}ISBN")
    print("-" * 120)
    for b in books:
        eta = days_to_finish(b, daily_rate)
        title = b.title if len(b.title) <= 33 else b.title[:33] + "…"
        author = b.author if len(b.author) <= 20 else b.author[:20] + "…"
        print(
            f"{b.id:<5}{title:<35}{author:<22}"
            f"{b.current_page:>7}/{b.total_pages:<5} {percent_complete(b):>6.1f}%  "
            f"{(str(eta) + ' d') if eta else '-':<6}{b.status.label:<10}{b.isbn or '-'}"
        )


def _probe(client) -> ReadinessReport:
    report = probe_services(client, config.GOOGLE_BOOKS_API_KEY)
    for line in report.summary_lines():
        print(line)
    return report


def _add(db: Session, **fields) -> int:
    try:
        book_data = schemas.BookCreate(**fields)
    except ValidationError as e:
        print(e, file=sys.stderr)
        return BAD_INPUT
    new_id = add_book(db, book_data)
    if new_id is None:
        print("Add failed.")
        return FAILED
    print(f"Added book with ID #{new_id}.")
    return OK


def cmd_check(db: Session, args) -> int:
    with make_client() as client:
        report = _probe(client)
    return FAILED if should_abort(report, args.require_google) else OK


def cmd_list(db: Session, args) -> int:
    _print_books(list_books(db, args.status), get_daily_rate(db))
    return OK


def cmd_search(db: Session, args) -> int:
    matches = search_books(db, args.text)
    if not matches:
        print("No matches.")
        return OK
    _print_books(matches, get_daily_rate(db))
    return OK


def cmd_add(db: Session, args) -> int:
    return _add(
        db,
        title=args.title,
        author=args.author,
        total_pages=args.pages,
        current_page=args.page,
        status=args.status,
        isbn=normalize(args.isbn),
    )


def cmd_add_isbn(db: Session, args) -> int:
    isbn13 = normalize(args.isbn)
    if not isbn13:
        print("Invalid ISBN.", file=sys.stderr)
        return BAD_INPUT

    with make_client() as client:
        report = _probe(client)
        if should_abort(report, args.require_google):
            print("Bye!")
            return FAILED

        print("Looking up…")
        found = build_resolver(client, config.GOOGLE_BOOKS_API_KEY, report.google_books).lookup(isbn13)

    title, author = args.title, args.author
    if found:
        print(f"Found:\nTitle:  {found.title or '(unknown)'}\nAuthor: {found.author or '(unknown)'}")
        title = found.title or title
        author = found.author or author
    else:
        print("No metadata found.")
    if not title:
        print("No title known for this ISBN; pass --title.", file=sys.stderr)
        return BAD_INPUT
    return _add(
        db,
        title=title,
        author=author,
        total_pages=args.pages,
        current_page=args.page,
        status=args.status,
        isbn=isbn13,
    )


def cmd_page(db: Session, args) -> int:
    book = get_book(db, args.id)
    if not book:
        print("Not found.")
        return FAILED
    upper = book.total_pages if book.total_pages > 0 else schemas.MAX_PAGES
    if not 0 <= args.page <= upper:
        print(f"Enter a number in [0,{upper}].", file=sys.stderr)
        return BAD_INPUT
    status = derive_status(book.total_pages, args.page)
    if not update_progress(db, args.id, args.page, status):
        print("Update failed.")
        return FAILED
    print("Updated.")
    return OK


def cmd_status(db: Session, args) -> int:
    if not get_book(db, args.id):
        print("Not found.")
        return FAILED
    if not update_status(db, args.id, args.status):
        print("Update failed.")
        return FAILED
    print("Status updated.")
    return OK


def cmd_delete(db: Session, args) -> int:
    if not delete_book(db, args.id):
        print("Not found.")
        return FAILED
    print("Deleted.")
    return OK


def cmd_rate(db: Session, args) -> int:
    if args.rate is None:
        print(f"Daily reading rate: {get_daily_rate(db)} pages/day")
        return OK
    if args.rate < 0:
        print("Rate must be zero or more.", file=sys.stderr)
        return BAD_INPUT
    if not set_daily_rate(db, args.rate):
        print("Could not save.")
        return FAILED
    print("Saved.")
    return OK


def cmd_export(db: Session, args) -> int:
    if not export_csv(db, args.path):
        print("Export failed.")
        return FAILED
    print("Exported.")
    return OK


def cmd_import(db: Session, args) -> int:
    if not import_csv(db, args.path):
        print("Import failed.")
        return FAILED
    print("Imported.")
    return OK


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="reading-tracker", description="Track reading progress of your books")
    ap.add_argument("--db", default=config.DATABASE_URL, help="SQLAlchemy URL or SQLite file path")
    ap.add_argument("--log-level", default=config.LOG_LEVEL, help="Log level: debug, info, warning, error")
    ap.add_argument(
        "--require-google",
        action="store_true",
        default=config.REQUIRE_GOOGLE_BOOKS,
        help="Exit instead of continuing with Open Library only when Google Books is not ready",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("check", help="Run the startup checks for the lookup services").set_defaults(func=cmd_check)

    p = sub.add_parser("list", help="List books by id")
    p.add_argument("--status", type=_status_arg, default=None)
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("search", help="Search title/author substring")
    p.add_argument("text")
    p.set_defaults(func=cmd_search)

    p = sub.add_parser("add", help="Add a book by hand")
    p.add_argument("--title", required=True)
    p.add_argument("--author", default="")
    p.add_argument("--pages", type=int, default=0)
    p.add_argument("--page", type=int, default=0)
    p.add_argument("--status", type=_status_arg, default=None, help="Omit to derive from the page")
    p.add_argument("--isbn", default="")
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("add-isbn", help="Add a book from an ISBN-10/13 lookup")
    p.add_argument("isbn")
    p.add_argument("--title", default="", help="Used when the lookup finds no title")
    p.add_argument("--author", default="")
    p.add_argument("--pages", type=int, default=0)
    p.add_argument("--page", type=int, default=0)
    p.add_argument("--status", type=_status_arg, default=None)
    p.set_defaults(func=cmd_add_isbn)

    p = sub.add_parser("page", help="Set the current page")
    p.add_argument("id", type=int)
    p.add_argument("page", type=int)
    p.set_defaults(func=cmd_page)

    p = sub.add_parser("status", help="Mark status (to-read / reading / finished)")
    p.add_argument("id", type=int)
    p.add_argument("status", type=_status_arg)
    p.set_defaults(func=cmd_status)

    p = sub.add_parser("delete", help="Delete a book")
    p.add_argument("id", type=int)
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("rate", help="Show or set the daily reading rate (pages/day)")
    p.add_argument("rate", type=int, nargs="?")
    p.set_defaults(func=cmd_rate)

    p = sub.add_parser("export", help="Export books to CSV")
    p.add_argument("path")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("import", help="Import books from CSV")
    p.add_argument("path")
    p.set_defaults(func=cmd_import)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=config.log_level(args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        db = _open_session(_db_url(args.db))
    except SQLAlchemyError as e:
        print(f"Failed to open {args.db}: {e}", file=sys.stderr)
        return FAILED

    with db:
        return args.func(db, args)


if __name__ == "__main__":
    raise SystemExit(main())
