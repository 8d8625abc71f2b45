# crud/book.py — book records; callers always get schema copies, never ORM rows
import logging
from typing import List, Optional

from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session

import schemas
from database import STORAGE_ERRORS
from models import Book, Status

logger = logging.getLogger(__name__)


def _copy(book: Book) -> schemas.Book:
    return schemas.Book.model_validate(book)


def _write(db: Session, stmt, what: str) -> bool:
    try:
        result = db.execute(stmt)
        db.commit()
    except STORAGE_ERRORS:
        db.rollback()
        logger.exception("Storage error while trying to %s", what)
        return False
    return result.rowcount > 0


def add_book(db: Session, book_data: schemas.BookCreate) -> Optional[int]:
    """Insert and return the new id; None if storage failed."""
    new_book = Book(
        title=book_data.title,
        author=book_data.author,
        total_pages=book_data.total_pages,
        current_page=book_data.current_page,
        status=int(book_data.status),
        isbn=book_data.isbn,
    )
    db.add(new_book)
    try:
        db.commit()
    except STORAGE_ERRORS:
        db.rollback()
        logger.exception("Storage error while adding %r", book_data.title)
        return None
    return new_book.id


def get_book(db: Session, book_id: int) -> Optional[schemas.Book]:
    try:
        book = db.get(Book, book_id)
    except STORAGE_ERRORS:
        logger.exception("Storage error while reading book %s", book_id)
        return None
    return _copy(book) if book else None


def list_books(db: Session, status: Optional[Status] = None) -> List[schemas.Book]:
    stmt = select(Book)
    if status is not None:
        stmt = stmt.where(Book.status == int(status))
    stmt = stmt.order_by(Book.id.asc())
    try:
        rows = db.execute(stmt).scalars().all()
    except STORAGE_ERRORS:
        logger.exception("Storage error while listing books")
        return []
    return [_copy(b) for b in rows]


def search_books(db: Session, q: str) -> List[schemas.Book]:
    """Case-insensitive substring match on title or author, by ascending id."""
    stmt = (
        select(Book)
        .where(or_(
            Book.title.icontains(q, autoescape=True),
            Book.author.icontains(q, autoescape=True),
        ))
        .order_by(Book.id.asc())
    )
    try:
        rows = db.execute(stmt).scalars().all()
    except STORAGE_ERRORS:
        logger.exception("Storage error while searching for %r", q)
        return []
    return [_copy(b) for b in rows]


def update_progress(db: Session, book_id: int, current_page: int, status: Status) -> bool:
    # Page/status consistency is the caller's job here; see update_status
    stmt = (
        update(Book)
        .where(Book.id == book_id)
        .values(current_page=current_page, status=int(status))
    )
    return _write(db, stmt, f"update progress of book {book_id}")


def update_status(db: Session, book_id: int, status: Status) -> bool:
    values = {"status": int(status)}
    if status == Status.FINISHED:
        values["current_page"] = Book.total_pages
    stmt = update(Book).where(Book.id == book_id).values(**values)
    return _write(db, stmt, f"update status of book {book_id}")


def delete_book(db: Session, book_id: int) -> bool:
    return _write(db, delete(Book).where(Book.id == book_id), f"delete book {book_id}")
