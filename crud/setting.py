# crud/setting.py — key/value settings; only the daily reading rate for now
import logging
from typing import Optional

from sqlalchemy.orm import Session

from database import STORAGE_ERRORS
from models import Setting

logger = logging.getLogger(__name__)

DAILY_RATE_KEY = "daily_rate"

# stored integers are 32-bit; anything outside reads as unparsable
INT_MIN, INT_MAX = -2**31, 2**31 - 1


def parse_int(text: Optional[str]) -> Optional[int]:
    try:
        value = int((text or "").strip())
    except ValueError:
        return None
    return value if INT_MIN <= value <= INT_MAX else None


def get_daily_rate(db: Session) -> int:
    """Pages per day, 0 when unset or unreadable."""
    try:
        row = db.get(Setting, DAILY_RATE_KEY)
    except STORAGE_ERRORS:
        logger.exception("Storage error while reading %s", DAILY_RATE_KEY)
        return 0
    rate = parse_int(row.value) if row else None
    return max(0, rate or 0)


def set_daily_rate(db: Session, rate: int) -> bool:
    try:
        db.merge(Setting(key=DAILY_RATE_KEY, value=str(min(max(0, rate), INT_MAX))))
        db.commit()
    except STORAGE_ERRORS:
        db.rollback()
        logger.exception("Storage error while saving %s", DAILY_RATE_KEY)
        return False
    return True
