import pytest


BOOKS = [
    {"title": "The Hobbit", "author": "J.R.R. Tolkien", "category": "Fantasy", "rating": 4.7,
     "published_date": "1937-09-21"},
    {"title": "Dune", "author": "Frank Herbert", "category": "Sci-Fi", "rating": 4.5,
     "published_date": "1965-08-01"},
    {"title": "The Silmarillion", "author": "J.R.R. Tolkien", "category": "Fantasy", "rating": 3.9,
     "published_date": "1977-09-15"},
    {"title": "Neuromancer", "author": "William Gibson", "category": "Sci-Fi", "rating": 4.1,
     "published_date": "1984-07-01"},
]


@pytest.fixture
def catalogue(client):
    for payload in BOOKS:
        assert client.post("/api/books", json=payload).status_code == 200


def test_create_book(client):
    response = client.post(
        "/api/books", json={"title": "The Hobbit", "author": "J.R.R. Tolkien", "isbn": "978-0-13-468599-1"}
    )
    assert response.status_code == 200
    assert response.json() == {
        "book_id": 1,
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "isbn": "978-0-13-468599-1",
        "is_available": True,
    }


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"author": "A"}, "Title is required"),
        ({"title": "T"}, "Author is required"),
        ({"title": "x" * 201, "author": "A"}, "Title must be between 1 and 200 characters"),
        ({"title": "T", "author": "A", "isbn": "123"}, "ISBN must be between 10 and 17 characters"),
        ({"title": "T", "author": "A", "rating": 6}, "Rating must be between 0 and 5"),
        ({"title": "T", "author": "A", "pages": 20000}, "Pages must be between 0 and 10000"),
        ({"book_id": -1, "title": "T", "author": "A"}, "Book ID must be a positive integer"),
    ],
)
def test_create_book_validation(client, payload, message):
    response = client.post("/api/books", json=payload)
    assert response.status_code == 400
    assert response.json() == {"message": message}


def test_create_book_with_bad_checksum(client):
    response = client.post("/api/books", json={"title": "T", "author": "A", "isbn": "978-0-13-468599-2"})
    assert response.status_code == 400
    assert response.json() == {"message": "Validation failed: Invalid ISBN format"}


def test_duplicate_book(client, book):
    response = client.post("/api/books", json={"book_id": 1, "title": "T", "author": "A"})
    assert response.status_code == 400
    assert response.json() == {"message": "book with id: 1 already exists"}


def test_get_book(client, book):
    assert client.get("/api/books/1").json() == book
    response = client.get("/api/books/2")
    assert response.status_code == 404
    assert response.json() == {"message": "book with id: 2 was not found"}
    assert client.get("/api/books/x").json() == {"message": "Book ID must be a positive integer"}


def test_list_books(client, book):
    response = client.get("/api/books")
    assert response.json() == {
        "books": [
            {
                "book_id": 1,
                "title": "The Hobbit",
                "author": "J.R.R. Tolkien",
                "isbn": "978-0-13-468599-1",
                "category": "General",
                "rating": 0,
                "is_available": True,
            }
        ]
    }


def test_update_book(client, book):
    response = client.put("/api/books/1", json={"title": "The Hobbit, or There and Back Again"})
    assert response.status_code == 200
    assert response.json()["title"] == "The Hobbit, or There and Back Again"
    assert client.put("/api/books/9", json={"title": "X"}).status_code == 404


def test_update_book_invalid_isbn_keeps_book(client, book):
    response = client.put("/api/books/1", json={"isbn": "0306406153"})
    assert response.status_code == 400
    assert response.json() == {"message": "Validation failed: Invalid ISBN format"}
    assert client.get("/api/books/1").json()["isbn"] == "978-0-13-468599-1"


def test_delete_book(client, book):
    response = client.delete("/api/books/1")
    assert response.json() == {"message": "book with id: 1 has been deleted successfully"}
    assert client.delete("/api/books/1").status_code == 404


def test_delete_borrowed_book(client, member, book):
    client.post("/api/borrow", json={"member_id": 1, "book_id": 1})
    response = client.delete("/api/books/1")
    assert response.status_code == 400
    assert response.json() == {"message": "cannot delete book with id: 1, book is currently borrowed"}


def test_delete_reserved_book(client, member, book):
    client.post("/api/reservations", json={"member_id": 1, "book_id": 1})
    response = client.delete("/api/books/1")
    assert response.status_code == 400
    assert response.json() == {"message": "cannot delete book with id: 1, book has active reservations"}


# search ---------------------------------------------------------------


def test_search_is_not_captured_by_id_route(client, catalogue):
    response = client.get("/api/books/search")
    assert response.status_code == 200
    body = response.json()
    assert body["pagination"] == {
        "current_page": 1,
        "total_pages": 1,
        "total_results": 4,
        "has_next": False,
        "has_previous": False,
    }
    assert "analytics" not in body
    assert "suggestions" not in body


def test_search_result_fields(client, catalogue):
    result = client.get("/api/books/search", params={"q": "dune"}).json()["books"][0]
    assert result["title"] == "Dune"
    assert result["relevance_score"] == 0.95
    assert result["similar_books"] == []
    assert result["member_rating"] == 4.5
    assert result["borrowing_trend"] == "increasing"
    assert result["avg_borrowing_duration"] == 14.5
    assert result["reservation_count"] == 0


def test_search_filters(client, catalogue):
    params = {"author": "tolkien", "min_rating": "4"}
    titles = [b["title"] for b in client.get("/api/books/search", params=params).json()["books"]]
    assert titles == ["The Hobbit"]

    params = {"category": "Sci-Fi", "published_after": "1970-01-01"}
    titles = [b["title"] for b in client.get("/api/books/search", params=params).json()["books"]]
    assert titles == ["Neuromancer"]


def test_search_sorting(client, catalogue):
    params = {"sort_by": "rating", "sort_order": "desc"}
    titles = [b["title"] for b in client.get("/api/books/search", params=params).json()["books"]]
    assert titles == ["The Hobbit", "Dune", "Neuromancer", "The Silmarillion"]

    params = {"sort_by": "title"}
    titles = [b["title"] for b in client.get("/api/books/search", params=params).json()["books"]]
    assert titles == ["Dune", "Neuromancer", "The Hobbit", "The Silmarillion"]


def test_search_pagination(client, catalogue):
    body = client.get("/api/books/search", params={"limit": "3", "page": "2"}).json()
    assert [b["title"] for b in body["books"]] == ["Neuromancer"]
    assert body["pagination"] == {
        "current_page": 2,
        "total_pages": 2,
        "total_results": 4,
        "has_next": False,
        "has_previous": True,
    }


def test_search_availability(client, catalogue):
    client.post("/api/members", json={"name": "Jane", "age": 30})
    client.post("/api/members", json={"name": "John", "age": 40})
    client.post("/api/borrow", json={"member_id": 1, "book_id": 2})
    client.post("/api/reservations", json={"member_id": 2, "book_id": 3})

    borrowed = client.get("/api/books/search", params={"availability": "borrowed"}).json()["books"]
    assert [b["title"] for b in borrowed] == ["Dune"]
    reserved = client.get("/api/books/search", params={"availability": "reserved"}).json()["books"]
    assert [b["title"] for b in reserved] == ["The Silmarillion"]
    everything = client.get("/api/books/search", params={"availability": "all"}).json()["books"]
    assert len(everything) == 4


def test_search_analytics_and_suggestions(client, catalogue):
    params = {"category": "Fantasy", "include_analytics": "true", "member_preferences": "true"}
    body = client.get("/api/books/search", params=params).json()
    analytics = body["analytics"]
    assert analytics["search_time_ms"] == 45
    assert analytics["filters_applied"] == ["category"]
    assert analytics["availability_summary"] == {"available": 2, "borrowed": 0, "reserved": 0}
    assert body["suggestions"]["related_searches"] == ["lord of the rings", "fantasy novels", "tolkien"]


@pytest.mark.parametrize(
    "params, message",
    [
        ({"limit": "0"}, "Limit must be between 1 and 100"),
        ({"limit": "101"}, "Limit must be between 1 and 100"),
        ({"page": "0"}, "Page must be a positive integer"),
        ({"sort_by": "isbn"}, "Sort by must be title, author, published_date, rating, popularity, or relevance"),
        ({"sort_order": "up"}, "Sort order must be asc or desc"),
        ({"availability": "lost"}, "Availability must be available, borrowed, reserved, or all"),
        ({"min_rating": "9"}, "Min rating must be between 0 and 5"),
        ({"published_after": "yesterday"}, "Published after date must be a valid ISO 8601 date"),
        ({"include_analytics": "maybe"}, "Include analytics must be a boolean"),
    ],
)
def test_search_parameter_validation(client, params, message):
    response = client.get("/api/books/search", params=params)
    assert response.status_code == 400
    assert response.json() == {"message": message}


def test_search_inverted_date_range(client):
    params = {"published_after": "2020-01-01", "published_before": "2010-01-01"}
    response = client.get("/api/books/search", params=params)
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "invalid_query_parameters"
    assert body["message"] == "Invalid date range: published_after cannot be later than published_before"
    assert body["details"]["invalid_params"] == ["published_after", "published_before"]
