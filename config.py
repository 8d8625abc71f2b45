# config.py
import logging
import os
import dotenv

# ========== Load environment ==========
dotenv.load_dotenv()


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, "") or default)
    except ValueError:
        return default


def _flag_env(name: str) -> bool:
    return (os.getenv(name, "") or "").strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("BOOKS_DATABASE_URL", "sqlite:///./books.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "info").lower()

# Blank or missing key disables Google Books for the whole run
GOOGLE_BOOKS_API_KEY = (os.getenv("GOOGLE_BOOKS_API_KEY") or "").strip()

# Answer to "Google Books not ready, Open Library is": abort instead of continuing
REQUIRE_GOOGLE_BOOKS = _flag_env("REQUIRE_GOOGLE_BOOKS")

LOOKUP_TIMEOUT = _float_env("LOOKUP_TIMEOUT", 6.0)

# ========== External endpoints ==========
OPEN_LIBRARY_URL = "https://openlibrary.org"
GOOGLE_BOOKS_URL = "https://www.googleapis.com/books/v1"
CONNECTIVITY_URL = "https://www.google.com/generate_204"
USER_AGENT = "ReadingTracker/1.0"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def log_level(name: str) -> int:
    return LOG_LEVELS.get((name or "").lower(), logging.INFO)
