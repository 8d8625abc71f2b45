# crud/csv_io.py — CSV export and all-or-nothing import of book records
import csv
import logging
from pathlib import Path
from typing import List, Optional, TextIO, Union

from sqlalchemy import select
from sqlalchemy.orm import Session

from crud.setting import parse_int
from database import STORAGE_ERRORS
from models import Book, Status

logger = logging.getLogger(__name__)

CSV_HEADER = ["id", "title", "author", "totalPages", "currentPage", "status", "isbn"]
MIN_FIELDS = len(CSV_HEADER)


def write_csv(db: Session, fh: TextIO) -> Optional[int]:
    """
    Write the header plus every book by ascending id to `fh`.

    Text fields are always double-quoted (inner quotes doubled), numbers are
    bare. Returns the number of books written, or None if they could not be
    read from storage.
    """
    try:
        books = db.execute(select(Book).order_by(Book.id.asc())).scalars().all()
    except STORAGE_ERRORS:
        logger.exception("Storage error while exporting")
        return None

    csv.writer(fh, lineterminator="\n").writerow(CSV_HEADER)
    out = csv.writer(fh, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for b in books:
        out.writerow([
            b.id, b.title, b.author or "", b.total_pages, b.current_page, int(b.status), b.isbn or "",
        ])
    return len(books)


def _looks_like_header(row: List[str]) -> bool:
    return bool(row) and parse_int(row[0]) is None


def _row_to_book(row: List[str]) -> Optional[Book]:
    if len(row) < MIN_FIELDS:
        return None
    # the id column is ignored; storage assigns a fresh one
    total = max(0, parse_int(row[3]) or 0)
    current = min(max(0, parse_int(row[4]) or 0), total)
    status = min(max(int(Status.TO_READ), parse_int(row[5]) or 0), int(Status.FINISHED))
    return Book(
        title=row[1],
        author=row[2],
        total_pages=total,
        current_page=current,
        status=status,
        isbn=row[6],
    )


def read_csv(db: Session, fh: TextIO) -> Optional[int]:
    """
    Insert every well-formed row of `fh` in a single transaction.

    Rows with fewer than seven fields are skipped. A storage failure rolls
    back the whole import. Returns the number of books imported, or None
    when nothing was committed because of an error.
    """
    imported = skipped = 0
    try:
        for rowno, row in enumerate(csv.reader(fh), start=1):
            if rowno == 1 and _looks_like_header(row):
                continue
            book = _row_to_book(row)
            if book is None:
                skipped += 1
                logger.warning("Skipping malformed CSV row %d", rowno)
                continue
            db.add(book)
            imported += 1
        db.commit()
    except STORAGE_ERRORS + (csv.Error, UnicodeDecodeError):
        db.rollback()
        logger.exception("Import failed; nothing was saved")
        return None
    logger.info("Imported %d books (%d rows skipped)", imported, skipped)
    return imported


def export_csv(db: Session, destination: Union[str, Path]) -> bool:
    try:
        with open(destination, "w", newline="", encoding="utf-8") as fh:
            return write_csv(db, fh) is not None
    except OSError as e:
        logger.error("Cannot write %s: %s", destination, e)
        return False


def import_csv(db: Session, source: Union[str, Path]) -> bool:
    try:
        with open(source, newline="", encoding="utf-8-sig") as fh:
            return read_csv(db, fh) is not None
    except OSError as e:
        logger.error("Cannot read %s: %s", source, e)
        return False
