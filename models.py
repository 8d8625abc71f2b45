# models.py
from enum import IntEnum
from typing import Optional

from sqlalchemy import Column, Integer, String
from database import Base


class Status(IntEnum):
    TO_READ = 0
    READING = 1
    FINISHED = 2

    @property
    def label(self) -> str:
        return {0: "To-Read", 1: "Reading", 2: "Finished"}[self.value]

    @classmethod
    def parse(cls, text: str) -> Optional["Status"]:
        """Accepts the names and numbers a user would type; None if unrecognised."""
        t = (text or "").strip().lower()
        if t in ("to-read", "toread", "todo", "0"):
            return cls.TO_READ
        if t in ("reading", "1"):
            return cls.READING
        if t in ("finished", "done", "2"):
            return cls.FINISHED
        return None


class Book(Base):
    __tablename__ = "books"
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False, index=True)
    author = Column(String, nullable=True, index=True, default="")
    total_pages = Column(Integer, nullable=False)
    current_page = Column(Integer, nullable=False)
    status = Column(Integer, nullable=False, index=True)
    isbn = Column(String, nullable=True, default="")


class Setting(Base):
    __tablename__ = "settings"
    key = Column(String, primary_key=True)
    value = Column(String, nullable=False)
