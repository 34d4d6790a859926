"""Book entity with ISBN validation and popularity scoring."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..core.validators import ISBNValidator, is_integer, is_number, parse_datetime, utcnow

TITLE_MAX_LENGTH = 200
AUTHOR_MAX_LENGTH = 100
MAX_RATING = 5
MAX_PAGES = 10000
MAX_POPULARITY = 10.0


@dataclass
class Book:
    """A title held by the library (one physical copy)."""

    book_id: Optional[int] = None
    title: str = ""
    author: str = ""
    isbn: str = ""
    is_available: bool = True
    category: str = "General"
    published_date: Optional[str] = None
    rating: float = 0
    borrowing_count: int = 0
    popularity_score: float = 0
    reservation_count: int = 0
    description: str = ""
    pages: int = 0
    language: str = "en"
    created_at: datetime = field(default_factory=utcnow)

    UPDATABLE_FIELDS = (
        "title",
        "author",
        "isbn",
        "is_available",
        "category",
        "published_date",
        "rating",
        "borrowing_count",
        "popularity_score",
        "reservation_count",
        "description",
        "pages",
        "language",
    )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Book":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})

    def validate(self) -> List[str]:
        errors: List[str] = []
        if not isinstance(self.title, str) or not self.title.strip():
            errors.append("Title is required")
        elif len(self.title) > TITLE_MAX_LENGTH:
            errors.append(f"Title must be {TITLE_MAX_LENGTH} characters or less")
        if not isinstance(self.author, str) or not self.author.strip():
            errors.append("Author is required")
        elif len(self.author) > AUTHOR_MAX_LENGTH:
            errors.append(f"Author must be {AUTHOR_MAX_LENGTH} characters or less")
        if self.isbn and not ISBNValidator.is_valid_isbn(self.isbn):
            errors.append("Invalid ISBN format")
        if self.book_id is not None and not is_integer(self.book_id):
            errors.append("Book ID must be an integer")
        if not is_number(self.rating) or not 0 <= self.rating <= MAX_RATING:
            errors.append(f"Rating must be between 0 and {MAX_RATING}")
        if not is_integer(self.pages) or not 0 <= self.pages <= MAX_PAGES:
            errors.append(f"Pages must be between 0 and {MAX_PAGES}")
        if self.published_date and parse_datetime(self.published_date) is None:
            errors.append("Invalid published date")
        if not isinstance(self.is_available, bool):
            errors.append("is_available must be a boolean")
        return errors

    def update(self, data: Dict[str, Any]) -> None:
        for name in self.UPDATABLE_FIELDS:
            if data.get(name) is not None:
                setattr(self, name, data[name])

    def published_at(self) -> Optional[datetime]:
        return parse_datetime(self.published_date)

    def increment_borrowing_count(self) -> None:
        self.borrowing_count += 1
        self.update_popularity_score()

    def increment_reservation_count(self) -> None:
        self.reservation_count += 1
        self.update_popularity_score()

    def update_popularity_score(self, now: Optional[datetime] = None) -> float:
        """Recompute ``popularity_score`` from borrows, rating, recency and reservations.

        score = 2*ln(borrows + 1) + 0.5*rating
                + 0.5*max(0, (365 - age_days) / 365) + 0.3*ln(reservations + 1)

        capped at 10, where ``age_days`` is the time since the book was
        added to the catalogue (at least one day).
        """
        now = now or utcnow()
        age_days = max(1.0, (now - self.created_at).total_seconds() / 86400)
        score = math.log(self.borrowing_count + 1) * 2
        score += self.rating * 0.5
        score += max(0.0, (365 - age_days) / 365) * 0.5
        score += math.log(self.reservation_count + 1) * 0.3
        self.popularity_score = min(score, MAX_POPULARITY)
        return self.popularity_score

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
