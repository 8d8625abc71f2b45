# services/progress.py — reading progress and ETA, no I/O
import math
from typing import Optional

from models import Status


def percent_complete(book) -> float:
    if book.total_pages <= 0:
        return 0.0
    return 100.0 * book.current_page / book.total_pages


def days_to_finish(book, daily_rate: int) -> Optional[int]:
    """Whole days left at `daily_rate` pages/day, or None when there is nothing to estimate."""
    if daily_rate <= 0 or book.current_page >= book.total_pages:
        return None
    return math.ceil((book.total_pages - book.current_page) / daily_rate)


def derive_status(total_pages: int, current_page: int) -> Status:
    if total_pages > 0 and current_page >= total_pages:
        return Status.FINISHED
    if current_page > 0:
        return Status.READING
    return Status.TO_READ
