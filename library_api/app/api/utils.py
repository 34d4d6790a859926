"""Sorting and pagination helpers for list endpoints."""

import math
from typing import Any, Dict, List, Optional, Tuple

from library_api.app.models.book import Book

# Public sort keys mapped to Book attributes; "relevance" keeps match order.
SORT_ATTRIBUTES = {
    "title": "title",
    "author": "author",
    "published_date": "published_date",
    "rating": "rating",
    "popularity": "popularity_score",
}


def _sort_value(book: Book, attribute: str) -> Any:
    value = getattr(book, attribute)
    if isinstance(value, str):
        return value.lower()
    if value is None:
        return "" if attribute == "published_date" else 0
    return value


def sort_books(books: List[Book], sort_by: Optional[str], sort_order: str = "asc") -> List[Book]:
    attribute = SORT_ATTRIBUTES.get(sort_by or "")
    if attribute is None:
        return books
    return sorted(books, key=lambda b: _sort_value(b, attribute), reverse=sort_order == "desc")


def paginate(items: List[Any], page: int, limit: int) -> Tuple[List[Any], Dict[str, Any]]:
    """Return the slice of ``items`` for ``page`` and the pagination block."""
    total = len(items)
    page = max(page, 1)
    limit = max(limit, 1)
    start = (page - 1) * limit
    total_pages = math.ceil(total / limit)
    return items[start:start + limit], {
        "current_page": page,
        "total_pages": total_pages,
        "total_results": total,
        "has_next": page < total_pages,
        "has_previous": page > 1,
    }
