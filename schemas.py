from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models import Status
from services.progress import derive_status

# largest page count accepted from a user
MAX_PAGES = 2_000_000_000


class BookBase(BaseModel):
    title: str = Field(min_length=1)
    author: str = ""
    total_pages: int = Field(default=0, ge=0)
    current_page: int = Field(default=0, ge=0)
    isbn: str = ""

    @field_validator("author", "isbn", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return "" if v is None else v


class BookCreate(BookBase):
    total_pages: int = Field(default=0, ge=0, le=MAX_PAGES)
    current_page: int = Field(default=0, ge=0, le=MAX_PAGES)
    # Left empty, the status is derived from the page position
    status: Optional[Status] = None

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, v):
        if isinstance(v, str):
            parsed = Status.parse(v)
            if parsed is None:
                raise ValueError(f"unknown status {v!r}")
            return parsed
        return v

    @model_validator(mode="after")
    def _check_pages(self):
        if self.total_pages > 0 and self.current_page > self.total_pages:
            raise ValueError("current_page cannot exceed total_pages")
        if self.status is None:
            self.status = derive_status(self.total_pages, self.current_page)
        return self


class Book(BookBase):
    id: int
    title: str
    status: Status

    model_config = ConfigDict(from_attributes=True)


class BookProgress(Book):
    percent_complete: float
    days_to_finish: Optional[int] = None


class LookupResult(BaseModel):
    title: str = ""
    author: str = ""
