"""
Pydantic models for book data and catalogue search.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..core.validators import parse_datetime
from .common import (
    require_bool,
    require_int_in_range,
    require_iso_date,
    require_length,
    require_number_in_range,
    require_positive_int,
    require_text,
)

BOOK_ID_MESSAGE = "Book ID must be a positive integer"
SORT_FIELDS = ("title", "author", "published_date", "rating", "popularity", "relevance")
AVAILABILITY_VALUES = ("available", "borrowed", "reserved", "all")


def _check_isbn(value: Any) -> Optional[str]:
    if value is None or value == "":
        return value
    return require_length(value, 10, 17, "ISBN must be between 10 and 17 characters")


def _check_rating(value: Any) -> Optional[float]:
    if value is None:
        return None
    return require_number_in_range(value, 0, 5, "Rating must be between 0 and 5")


def _check_pages(value: Any) -> Optional[int]:
    if value is None:
        return None
    return require_int_in_range(value, 0, 10000, "Pages must be between 0 and 10000")


def _check_published(value: Any) -> Optional[str]:
    if value is None:
        return None
    return require_iso_date(value, "Published date must be a valid ISO 8601 date")


class BookCreate(BaseModel):
    """Schema for adding a book to the catalogue."""

    book_id: Optional[int] = Field(None, examples=[1])
    title: Optional[str] = Field(None, validate_default=True, examples=["The Hobbit"])
    author: Optional[str] = Field(None, validate_default=True, examples=["J.R.R. Tolkien"])
    isbn: Optional[str] = Field(None, examples=["978-0-13-468599-1"])
    category: Optional[str] = Field(None, examples=["Fantasy"])
    published_date: Optional[str] = Field(None, examples=["1937-09-21"])
    rating: Optional[float] = Field(None, examples=[4.7])
    pages: Optional[int] = Field(None, examples=[310])
    description: Optional[str] = None
    language: Optional[str] = None
    is_available: Optional[bool] = None

    @field_validator("book_id", mode="before")
    @classmethod
    def _check_book_id(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        return require_positive_int(value, BOOK_ID_MESSAGE)

    @field_validator("title", mode="before")
    @classmethod
    def _check_title(cls, value: Any) -> str:
        return require_text(value, 200, "Title is required", "Title must be between 1 and 200 characters")

    @field_validator("author", mode="before")
    @classmethod
    def _check_author(cls, value: Any) -> str:
        return require_text(value, 100, "Author is required", "Author must be between 1 and 100 characters")

    _isbn = field_validator("isbn", mode="before")(_check_isbn)
    _rating = field_validator("rating", mode="before")(_check_rating)
    _pages = field_validator("pages", mode="before")(_check_pages)
    _published = field_validator("published_date", mode="before")(_check_published)


class BookUpdate(BaseModel):
    """Partial update of a catalogue entry."""

    title: Optional[str] = None
    author: Optional[str] = None
    isbn: Optional[str] = None
    category: Optional[str] = None
    published_date: Optional[str] = None
    rating: Optional[float] = None
    pages: Optional[int] = None
    description: Optional[str] = None
    language: Optional[str] = None
    is_available: Optional[bool] = None

    @field_validator("title", mode="before")
    @classmethod
    def _check_title(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return require_text(value, 200, "Title is required", "Title must be between 1 and 200 characters")

    @field_validator("author", mode="before")
    @classmethod
    def _check_author(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return require_text(value, 100, "Author is required", "Author must be between 1 and 100 characters")

    @field_validator("is_available", mode="before")
    @classmethod
    def _check_available(cls, value: Any) -> Optional[bool]:
        if value is None:
            return None
        return require_bool(value, "is_available must be a boolean")

    _isbn = field_validator("isbn", mode="before")(_check_isbn)
    _rating = field_validator("rating", mode="before")(_check_rating)
    _pages = field_validator("pages", mode="before")(_check_pages)
    _published = field_validator("published_date", mode="before")(_check_published)


class BookRead(BaseModel):
    book_id: int
    title: str
    author: str
    isbn: str
    is_available: bool

    model_config = {
        "from_attributes": True,
    }


class BookSummary(BookRead):
    category: str
    rating: float


class BookList(BaseModel):
    books: List[BookSummary]


class BookSearchQuery(BaseModel):
    """Query parameters of ``GET /api/books/search``.

    Values arrive as strings; the validators convert them and produce
    the messages returned to the client.
    """

    q: Optional[str] = None
    category: Optional[str] = None
    author: Optional[str] = None
    published_after: Optional[str] = None
    published_before: Optional[str] = None
    min_rating: Optional[float] = None
    max_rating: Optional[float] = None
    availability: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: str = "asc"
    page: int = 1
    limit: Optional[int] = None
    include_analytics: bool = False
    member_preferences: bool = False
    borrowing_trends: bool = False

    @field_validator("q", mode="before")
    @classmethod
    def _check_q(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return require_length(value, 1, 100, "Search query must be between 1 and 100 characters")

    @field_validator("category", mode="before")
    @classmethod
    def _check_category(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return require_length(value, 1, 50, "Category must be between 1 and 50 characters")

    @field_validator("author", mode="before")
    @classmethod
    def _check_author(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return require_length(value, 1, 100, "Author must be between 1 and 100 characters")

    @field_validator("published_after", mode="before")
    @classmethod
    def _check_after(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return require_iso_date(value, "Published after date must be a valid ISO 8601 date")

    @field_validator("published_before", mode="before")
    @classmethod
    def _check_before(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return require_iso_date(value, "Published before date must be a valid ISO 8601 date")

    @field_validator("min_rating", mode="before")
    @classmethod
    def _check_min_rating(cls, value: Any) -> Optional[float]:
        if value is None:
            return None
        return require_number_in_range(value, 0, 5, "Min rating must be between 0 and 5")

    @field_validator("max_rating", mode="before")
    @classmethod
    def _check_max_rating(cls, value: Any) -> Optional[float]:
        if value is None:
            return None
        return require_number_in_range(value, 0, 5, "Max rating must be between 0 and 5")

    @field_validator("availability", mode="before")
    @classmethod
    def _check_availability(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        if value not in AVAILABILITY_VALUES:
            raise ValueError("Availability must be available, borrowed, reserved, or all")
        return value

    @field_validator("sort_by", mode="before")
    @classmethod
    def _check_sort_by(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        if value not in SORT_FIELDS:
            raise ValueError("Sort by must be title, author, published_date, rating, popularity, or relevance")
        return value

    @field_validator("sort_order", mode="before")
    @classmethod
    def _check_sort_order(cls, value: Any) -> str:
        if value is None:
            return "asc"
        if value not in ("asc", "desc"):
            raise ValueError("Sort order must be asc or desc")
        return value

    @field_validator("page", mode="before")
    @classmethod
    def _check_page(cls, value: Any) -> int:
        if value is None:
            return 1
        return require_positive_int(value, "Page must be a positive integer")

    @field_validator("limit", mode="before")
    @classmethod
    def _check_limit(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        return require_int_in_range(value, 1, 100, "Limit must be between 1 and 100")

    @field_validator("include_analytics", mode="before")
    @classmethod
    def _check_include_analytics(cls, value: Any) -> bool:
        if value is None:
            return False
        return require_bool(value, "Include analytics must be a boolean")

    @field_validator("member_preferences", mode="before")
    @classmethod
    def _check_member_preferences(cls, value: Any) -> bool:
        if value is None:
            return False
        return require_bool(value, "Member preferences must be a boolean")

    @field_validator("borrowing_trends", mode="before")
    @classmethod
    def _check_borrowing_trends(cls, value: Any) -> bool:
        if value is None:
            return False
        return require_bool(value, "Borrowing trends must be a boolean")

    @model_validator(mode="after")
    def _check_date_range(self) -> "BookSearchQuery":
        if self.published_after and self.published_before:
            if parse_datetime(self.published_after) >= parse_datetime(self.published_before):
                raise ValueError("Invalid date range: published_after cannot be later than published_before")
        return self

    def availability_filter(self) -> Optional[bool]:
        if self.availability == "available":
            return True
        if self.availability == "borrowed":
            return False
        return None
