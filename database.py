from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from config import DATABASE_URL


def make_engine(url: str = DATABASE_URL) -> Engine:
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = make_engine()
SessionLocal = sessionmaker(engine, expire_on_commit=False)
Base = declarative_base()


def get_db():
    with SessionLocal() as session:
        yield session


def init_db(bind: Engine = engine) -> None:
    # models must be imported so their tables are registered on Base
    import models  # noqa: F401

    Base.metadata.create_all(bind)


# sqlite3 raises OverflowError itself, outside SQLAlchemy's wrapping, for ints past 64 bits
STORAGE_ERRORS = (SQLAlchemyError, OverflowError)
