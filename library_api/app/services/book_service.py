"""
Business logic for books.

Besides CRUD, ``BookService.search_books`` implements the catalogue
search: free-text matching plus structured filters.  Sorting and
pagination are left to the caller.
"""

import copy
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..core.exceptions import ConflictError, ValidationFailedError
from ..core.repository import InMemoryRepository, Repository
from ..core.validators import parse_datetime
from ..models.book import Book

logger = logging.getLogger(__name__)


class BookService:
    """CRUD and search for catalogue entries."""

    def __init__(self, repository: Optional[Repository] = None) -> None:
        self.repository: Repository = repository if repository is not None else InMemoryRepository()
        self._next_id = 1

    def clear(self) -> None:
        self.repository.clear()
        self._next_id = 1

    def _allocate_id(self) -> int:
        while self._next_id in self.repository:
            self._next_id += 1
        book_id = self._next_id
        self._next_id += 1
        return book_id

    def create_book(self, data: Dict[str, Any]) -> Book:
        book_id = data.get("book_id")
        if book_id is not None and book_id in self.repository:
            raise ConflictError(f"book with id: {book_id} already exists")

        book = Book.from_dict(data)
        errors = book.validate()
        if errors:
            raise ValidationFailedError(errors)

        if book.book_id is None:
            book.book_id = self._allocate_id()
        self.repository.add(book.book_id, book)
        logger.info("Created book %s (%s)", book.book_id, book.title)
        return book

    def get_book(self, book_id: int) -> Optional[Book]:
        return self.repository.get(book_id)

    def get_all_books(self) -> List[Book]:
        return self.repository.values()

    def update_book(self, book_id: int, data: Dict[str, Any]) -> Optional[Book]:
        book = self.repository.get(book_id)
        if book is None:
            return None
        staged = copy.deepcopy(book)
        staged.update(data)
        errors = staged.validate()
        if errors:
            raise ValidationFailedError(errors)
        book.update(data)
        return book

    def delete_book(self, book_id: int) -> bool:
        deleted = self.repository.remove(book_id)
        if deleted:
            logger.info("Deleted book %s", book_id)
        return deleted

    def search_books(self, query: Optional[str] = None, filters: Optional[Dict[str, Any]] = None) -> List[Book]:
        """Return books matching ``query`` and ``filters`` (unsorted).

        ``query`` is matched case-insensitively as a substring of title,
        author, category or description.  Supported filters:

        - ``category``: exact match
        - ``author``: case-insensitive substring
        - ``availability``: ``True``/``False`` against ``is_available``
        - ``min_rating`` / ``max_rating``: inclusive bounds
        - ``published_after`` / ``published_before``: inclusive date bounds;
          books without a published date never match a date bound
        """
        filters = filters or {}
        results = self.repository.values()

        if query:
            term = query.lower()
            results = [
                b for b in results
                if term in b.title.lower()
                or term in b.author.lower()
                or term in (b.category or "").lower()
                or term in (b.description or "").lower()
            ]

        category = filters.get("category")
        if category:
            results = [b for b in results if b.category == category]

        author = filters.get("author")
        if author:
            needle = author.lower()
            results = [b for b in results if needle in b.author.lower()]

        availability = filters.get("availability")
        if availability is not None:
            results = [b for b in results if b.is_available is availability]

        min_rating = filters.get("min_rating")
        if min_rating is not None:
            results = [b for b in results if b.rating >= min_rating]

        max_rating = filters.get("max_rating")
        if max_rating is not None:
            results = [b for b in results if b.rating <= max_rating]

        after = _as_datetime(filters.get("published_after"))
        if after is not None:
            results = [b for b in results if b.published_at() is not None and b.published_at() >= after]

        before = _as_datetime(filters.get("published_before"))
        if before is not None:
            results = [b for b in results if b.published_at() is not None and b.published_at() <= before]

        return results


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    return parse_datetime(value)
