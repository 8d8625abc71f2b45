# main.py — reading tracker HTTP API: records, ISBN lookup, progress, CSV transfer
import io
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import Response
from pydantic import ValidationError
from sqlalchemy.orm import Session

import config
import schemas
from crud.book import (
    add_book, delete_book, get_book, list_books, search_books, update_progress, update_status,
)
from crud.csv_io import read_csv, write_csv
from crud.setting import get_daily_rate, set_daily_rate
from database import get_db, init_db
from models import Status
from services.http_client import make_client
from services.isbn_utils import normalize
from services.lookup import MetadataResolver, build_resolver
from services.progress import days_to_finish, derive_status, percent_complete
from services.readiness import ReadinessReport, probe_services, should_abort

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=config.log_level(config.LOG_LEVEL),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    client = make_client()
    try:
        report = probe_services(client, config.GOOGLE_BOOKS_API_KEY)
        if should_abort(report, config.REQUIRE_GOOGLE_BOOKS):
            raise RuntimeError("Google Books is not ready and REQUIRE_GOOGLE_BOOKS is set")
        if report.needs_decision:
            logger.warning("Continuing with Open Library only")
        app.state.readiness = report
        app.state.resolver = build_resolver(client, config.GOOGLE_BOOKS_API_KEY, report.google_books)
        yield
    finally:
        client.close()


app = FastAPI(title="ReadingTracker", lifespan=lifespan)


def get_resolver(request: Request) -> MetadataResolver:
    return request.app.state.resolver


def get_readiness(request: Request) -> ReadinessReport:
    return request.app.state.readiness


def _parse_status(text: str) -> Status:
    status = Status.parse(text)
    if status is None:
        raise HTTPException(400, f"Unknown status {text!r}; use to-read, reading or finished")
    return status


def _with_progress(book: schemas.Book, daily_rate: int) -> schemas.BookProgress:
    return schemas.BookProgress(
        **book.model_dump(),
        percent_complete=percent_complete(book),
        days_to_finish=days_to_finish(book, daily_rate),
    )


def _existing(db: Session, book_id: int) -> schemas.Book:
    book = get_book(db, book_id)
    if not book:
        raise HTTPException(404, "Book not found")
    return book


@app.get("/books", response_model=List[schemas.BookProgress])
def books_list(status: Optional[str] = None, db: Session = Depends(get_db)):
    rate = get_daily_rate(db)
    wanted = _parse_status(status) if status else None
    return [_with_progress(b, rate) for b in list_books(db, wanted)]


@app.get("/books/search", response_model=List[schemas.BookProgress])
def books_search(q: str, db: Session = Depends(get_db)):
    rate = get_daily_rate(db)
    return [_with_progress(b, rate) for b in search_books(db, q)]


@app.get("/books/{book_id}", response_model=schemas.BookProgress)
def books_get(book_id: int, db: Session = Depends(get_db)):
    return _with_progress(_existing(db, book_id), get_daily_rate(db))


@app.post("/books", status_code=201)
def books_create(book_data: schemas.BookCreate, db: Session = Depends(get_db)):
    # an ISBN that does not normalise is dropped rather than rejected
    book_data = book_data.model_copy(update={"isbn": normalize(book_data.isbn)})
    new_id = add_book(db, book_data)
    if new_id is None:
        raise HTTPException(500, "Add failed")
    return {"id": new_id}


@app.post("/books/isbn", status_code=201)
def books_create_from_isbn(
    isbn: str = Form(...),
    total_pages: int = Form(0),
    current_page: int = Form(0),
    status: str = Form(""),
    title: str = Form(""),
    author: str = Form(""),
    db: Session = Depends(get_db),
    resolver: MetadataResolver = Depends(get_resolver),
):
    isbn13 = normalize(isbn)
    if not isbn13:
        raise HTTPException(400, "Invalid ISBN")

    found = resolver.lookup(isbn13)
    if found:
        title = found.title or title
        author = found.author or author
    if not title:
        raise HTTPException(404, "No metadata found for this ISBN; supply a title")

    try:
        book_data = schemas.BookCreate(
            title=title,
            author=author,
            total_pages=total_pages,
            current_page=current_page,
            status=_parse_status(status) if status else None,
            isbn=isbn13,
        )
    except ValidationError as e:
        raise HTTPException(422, str(e))
    new_id = add_book(db, book_data)
    if new_id is None:
        raise HTTPException(500, "Add failed")
    return {"id": new_id, "title": book_data.title, "author": book_data.author, "found": found is not None}


@app.get("/lookup/{isbn}", response_model=schemas.LookupResult)
def lookup(isbn: str, resolver: MetadataResolver = Depends(get_resolver)):
    if not normalize(isbn):
        raise HTTPException(400, "Invalid ISBN")
    found = resolver.lookup(isbn)
    if not found:
        raise HTTPException(404, "No metadata found")
    return found


@app.post("/books/{book_id}/page")
def books_set_page(book_id: int, page: int = Form(...), db: Session = Depends(get_db)):
    book = _existing(db, book_id)
    upper = book.total_pages if book.total_pages > 0 else schemas.MAX_PAGES
    if not 0 <= page <= upper:
        raise HTTPException(400, f"Page must be between 0 and {upper}")
    status = derive_status(book.total_pages, page)
    if not update_progress(db, book_id, page, status):
        raise HTTPException(500, "Update failed")
    return {"id": book_id, "current_page": page, "status": status}


@app.post("/books/{book_id}/status")
def books_set_status(book_id: int, status: str = Form(...), db: Session = Depends(get_db)):
    _existing(db, book_id)
    if not update_status(db, book_id, _parse_status(status)):
        raise HTTPException(500, "Update failed")
    return _existing(db, book_id)


@app.delete("/books/{book_id}")
def books_delete(book_id: int, db: Session = Depends(get_db)):
    if not delete_book(db, book_id):
        raise HTTPException(404, "Book not found")
    return {"deleted": book_id}


@app.get("/settings/daily-rate")
def daily_rate_get(db: Session = Depends(get_db)):
    return {"daily_rate": get_daily_rate(db)}


@app.put("/settings/daily-rate")
def daily_rate_set(rate: int = Form(...), db: Session = Depends(get_db)):
    if rate < 0:
        raise HTTPException(400, "Rate must be zero or more pages per day")
    if not set_daily_rate(db, rate):
        raise HTTPException(500, "Could not save the daily rate")
    return {"daily_rate": get_daily_rate(db)}


@app.get("/export.csv")
def export(db: Session = Depends(get_db)):
    buf = io.StringIO()
    if write_csv(db, buf) is None:
        raise HTTPException(500, "Export failed")
    return Response(
        content=buf.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="books.csv"'},
    )


@app.post("/import")
def import_(file: UploadFile = File(...), db: Session = Depends(get_db)):
    try:
        text = file.file.read().decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(400, "CSV must be UTF-8")
    imported = read_csv(db, io.StringIO(text, newline=""))
    if imported is None:
        raise HTTPException(500, "Import failed; nothing was saved")
    return {"imported": imported}


@app.get("/readiness")
def readiness(report: ReadinessReport = Depends(get_readiness)):
    return {
        "internet": report.internet,
        "api_key_present": report.api_key_present,
        "google_books": report.google_books,
        "open_library": report.open_library,
        "needs_decision": report.needs_decision,
        "messages": report.summary_lines(),
    }
