"""
Book endpoints: catalogue CRUD and the advanced search.

``/search`` is declared before ``/{book_id}`` so that it is not
captured by the id route.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import ValidationError

from library_api.app.core.config import Settings
from library_api.app.core.exceptions import LibraryError
from library_api.app.models.book import Book
from library_api.app.schemas.book import BOOK_ID_MESSAGE, BookCreate, BookList, BookRead, BookSearchQuery, BookUpdate
from library_api.app.schemas.common import MessageResponse
from library_api.app.services.container import ServiceContainer

from ..deps import first_error_message, get_services, get_settings, parse_id
from ..utils import paginate, sort_books

router = APIRouter()

# Canned values for the analytics and suggestion blocks of the search
# response; nothing here is computed from real usage.
MOCK_RELEVANCE_SCORE = 0.95
MOCK_AVG_BORROWING_DURATION = 14.5
MOCK_SEARCH_TIME_MS = 45
TRENDING_CATEGORIES = ["Fantasy", "Sci-Fi", "Mystery"]
POPULAR_AUTHORS = ["J.R.R. Tolkien", "George R.R. Martin"]
SUGGESTIONS = {
    "related_searches": ["lord of the rings", "fantasy novels", "tolkien"],
    "alternative_categories": ["Epic Fantasy", "Classic Literature"],
    "recommended_books": [],
}
FILTER_NAMES = ("category", "author", "published_after", "published_before", "min_rating", "max_rating")


def _not_found(book_id: int) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"book with id: {book_id} was not found")


def get_search_query(request: Request) -> BookSearchQuery:
    """Validate the search query string.

    A bad individual parameter yields ``{"message": ...}``; an inverted
    publication date range yields the ``invalid_query_parameters`` body.
    """
    try:
        return BookSearchQuery.model_validate(dict(request.query_params))
    except ValidationError as exc:
        errors = exc.errors()
        if errors and not errors[0].get("loc"):
            raise LibraryError(
                first_error_message(errors),
                error="invalid_query_parameters",
                details={
                    "invalid_params": ["published_after", "published_before"],
                    "suggested_corrections": {
                        "published_after": "2020-01-01",
                        "published_before": "2023-12-31",
                    },
                },
            ) from exc
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=first_error_message(errors)) from exc


def _search_result(book: Book) -> Dict[str, Any]:
    return {
        "book_id": book.book_id,
        "title": book.title,
        "author": book.author,
        "isbn": book.isbn,
        "category": book.category,
        "published_date": book.published_date,
        "rating": book.rating,
        "is_available": book.is_available,
        "borrowing_count": book.borrowing_count,
        "popularity_score": book.popularity_score,
        "relevance_score": MOCK_RELEVANCE_SCORE,
        "similar_books": [],
        "member_rating": book.rating,
        "borrowing_trend": "increasing",
        "avg_borrowing_duration": MOCK_AVG_BORROWING_DURATION,
        "reservation_count": book.reservation_count,
    }


@router.post("", response_model=BookRead)
async def create_book(book: BookCreate, services: ServiceContainer = Depends(get_services)) -> Book:
    """Add a book to the catalogue.

    An ISBN that passes the length check but fails the checksum is
    rejected with ``"Validation failed: Invalid ISBN format"``.
    """
    return services.books.create_book(book.model_dump(exclude_none=True))


@router.get("", response_model=BookList)
async def list_books(services: ServiceContainer = Depends(get_services)) -> dict:
    return {"books": services.books.get_all_books()}


@router.get("/search")
async def search_books(
    query: BookSearchQuery = Depends(get_search_query),
    services: ServiceContainer = Depends(get_services),
    config: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Search the catalogue with filters, sorting and pagination.

    ``availability`` accepts ``available``, ``borrowed``, ``reserved``
    (books with an open reservation) or ``all``.  ``include_analytics``
    and ``member_preferences`` add the ``analytics`` and ``suggestions``
    blocks.
    """
    filters: Dict[str, Any] = {name: getattr(query, name) for name in FILTER_NAMES}
    filters["availability"] = query.availability_filter()
    results: List[Book] = services.books.search_books(query.q, filters)

    reserved_ids = services.reservations.reserved_book_ids()
    if query.availability == "reserved":
        results = [book for book in results if book.book_id in reserved_ids]

    results = sort_books(results, query.sort_by, query.sort_order)
    limit = min(query.limit or config.default_page_size, config.max_page_size)
    page, pagination = paginate(results, query.page, limit)
    response: Dict[str, Any] = {
        "books": [_search_result(book) for book in page],
        "pagination": pagination,
    }

    if query.include_analytics:
        applied = [name for name in FILTER_NAMES if filters[name] is not None]
        if query.availability not in (None, "all"):
            applied.append("availability")
        response["analytics"] = {
            "search_time_ms": MOCK_SEARCH_TIME_MS,
            "filters_applied": applied,
            "trending_categories": TRENDING_CATEGORIES,
            "popular_authors": POPULAR_AUTHORS,
            "availability_summary": {
                "available": sum(1 for book in results if book.is_available),
                "borrowed": sum(1 for book in results if not book.is_available),
                "reserved": sum(1 for book in results if book.book_id in reserved_ids),
            },
        }
    if query.member_preferences:
        response["suggestions"] = SUGGESTIONS
    return response


@router.get("/{book_id}", response_model=BookRead)
async def get_book(book_id: str, services: ServiceContainer = Depends(get_services)) -> Book:
    book_key = parse_id(book_id, BOOK_ID_MESSAGE)
    book = services.books.get_book(book_key)
    if book is None:
        raise _not_found(book_key)
    return book


@router.put("/{book_id}", response_model=BookRead)
async def update_book(
    book_id: str,
    updates: BookUpdate,
    services: ServiceContainer = Depends(get_services),
) -> Book:
    book_key = parse_id(book_id, BOOK_ID_MESSAGE)
    book = services.books.update_book(book_key, updates.model_dump(exclude_none=True))
    if book is None:
        raise _not_found(book_key)
    return book


@router.delete("/{book_id}", response_model=MessageResponse)
async def delete_book(book_id: str, services: ServiceContainer = Depends(get_services)) -> dict:
    """Delete a book unless it is on loan or has open reservations."""
    book_key = parse_id(book_id, BOOK_ID_MESSAGE)
    services.circulation.delete_book(book_key)
    return {"message": f"book with id: {book_key} has been deleted successfully"}
