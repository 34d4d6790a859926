from datetime import datetime, timedelta, timezone

import pytest

from library_api.app.core.exceptions import ConflictError, ValidationFailedError
from library_api.app.core.repository import InMemoryRepository
from library_api.app.services import BookService, MemberService, ReservationService, TransactionService


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def members():
    return MemberService()


@pytest.fixture
def books():
    service = BookService()
    service.create_book(
        {"title": "The Hobbit", "author": "J.R.R. Tolkien", "category": "Fantasy", "rating": 4.7,
         "published_date": "1937-09-21", "description": "A hobbit goes on an adventure"}
    )
    service.create_book(
        {"title": "Dune", "author": "Frank Herbert", "category": "Sci-Fi", "rating": 4.5,
         "published_date": "1965-08-01"}
    )
    service.create_book(
        {"title": "The Silmarillion", "author": "J.R.R. Tolkien", "category": "Fantasy", "rating": 3.9,
         "is_available": False}
    )
    return service


# members --------------------------------------------------------------


def test_create_member_assigns_sequential_ids(members):
    first = members.create_member({"name": "Jane", "age": 30})
    second = members.create_member({"name": "John", "age": 40})
    assert (first.member_id, second.member_id) == (1, 2)


def test_auto_ids_skip_explicit_ids(members):
    members.create_member({"member_id": 1, "name": "Jane", "age": 30})
    assert members.create_member({"name": "John", "age": 40}).member_id == 2


def test_duplicate_member_id_is_rejected_without_mutation(members):
    members.create_member({"member_id": 7, "name": "Jane", "age": 30})
    with pytest.raises(ConflictError, match="member with id: 7 already exists"):
        members.create_member({"member_id": 7, "name": "Other", "age": 50})
    assert members.get_member(7).name == "Jane"
    assert len(members.get_all_members()) == 1


def test_invalid_member_lists_every_error(members):
    with pytest.raises(ValidationFailedError) as excinfo:
        members.create_member({"name": "", "age": 5})
    assert excinfo.value.message == "Validation failed: Name is required, Age must be between 12 and 120"
    assert members.get_all_members() == []


def test_failed_update_leaves_member_untouched(members):
    members.create_member({"member_id": 1, "name": "Jane", "age": 30})
    with pytest.raises(ValidationFailedError):
        members.update_member(1, {"name": "Janet", "age": 5})
    stored = members.get_member(1)
    assert (stored.name, stored.age) == ("Jane", 30)


def test_update_and_delete_missing_member(members):
    assert members.update_member(99, {"name": "x"}) is None
    assert members.delete_member(99) is False


def test_custom_repository_is_used():
    repository = InMemoryRepository()
    service = MemberService(repository)
    service.create_member({"name": "Jane", "age": 30})
    assert len(repository) == 1


# books ----------------------------------------------------------------


def test_duplicate_book_id(books):
    with pytest.raises(ConflictError, match="book with id: 1 already exists"):
        books.create_book({"book_id": 1, "title": "X", "author": "Y"})


def test_invalid_isbn_rejected(books):
    with pytest.raises(ValidationFailedError, match="Invalid ISBN format"):
        books.create_book({"title": "X", "author": "Y", "isbn": "978-0-13-468599-2"})


def test_search_matches_description_case_insensitively(books):
    assert [b.title for b in books.search_books("ADVENTURE")] == ["The Hobbit"]


def test_search_by_author_substring_and_category(books):
    results = books.search_books(None, {"author": "tolkien", "category": "Fantasy"})
    assert {b.title for b in results} == {"The Hobbit", "The Silmarillion"}


def test_search_availability_and_rating_bounds(books):
    available = books.search_books(None, {"availability": True, "min_rating": 4.5, "max_rating": 4.7})
    assert {b.title for b in available} == {"The Hobbit", "Dune"}
    borrowed = books.search_books(None, {"availability": False})
    assert [b.title for b in borrowed] == ["The Silmarillion"]


def test_search_published_range_is_inclusive(books):
    results = books.search_books(None, {"published_after": "1937-09-21", "published_before": "1965-08-01"})
    assert {b.title for b in results} == {"The Hobbit", "Dune"}
    results = books.search_books(None, {"published_after": "1950-01-01"})
    assert [b.title for b in results] == ["Dune"]


# transactions ---------------------------------------------------------


def test_borrow_return_cycle():
    transactions = TransactionService()
    transaction = transactions.borrow_book(1, 1)
    assert transactions.has_active_borrow(1)
    assert transactions.is_book_currently_borrowed(1)
    with pytest.raises(ConflictError, match="member with id: 1 has already borrowed a book"):
        transactions.borrow_book(1, 2)
    with pytest.raises(ConflictError, match="book with id: 1 is currently borrowed"):
        transactions.borrow_book(2, 1)

    returned = transactions.return_book(1, 1)
    assert returned is transaction
    assert returned.status == "returned"
    assert not transactions.has_active_borrow(1)
    assert not transactions.is_book_currently_borrowed(1)


def test_return_without_borrow():
    with pytest.raises(ConflictError, match="member with id: 1 has not borrowed book with id: 2"):
        TransactionService().return_book(1, 2)


def test_return_records_fine():
    transactions = TransactionService(fine_rate_per_day=1.0, max_fine=5)
    transaction = transactions.borrow_book(1, 1)
    late = transaction.due_date + timedelta(days=3)
    assert transactions.return_book(1, 1, now=late).fine_amount == 3
    transaction = transactions.borrow_book(1, 1)
    very_late = transaction.due_date + timedelta(days=30)
    assert transactions.return_book(1, 1, now=very_late).fine_amount == 5


def test_overdue_books():
    transactions = TransactionService()
    transactions.create_transaction({"member_id": 1, "book_id": 1, "borrowed_at": NOW})
    transactions.create_transaction({"member_id": 2, "book_id": 2, "borrowed_at": NOW + timedelta(days=10)})
    overdue = transactions.get_overdue_books(now=NOW + timedelta(days=20))
    assert [t.book_id for t in overdue] == [1]


def test_borrowing_history_includes_returned_loans():
    transactions = TransactionService()
    transactions.borrow_book(1, 1)
    transactions.return_book(1, 1)
    transactions.borrow_book(1, 2)
    assert [t.status for t in transactions.get_borrowing_history(1)] == ["returned", "active"]


# reservations ---------------------------------------------------------


def test_reservation_ids_are_sequential_per_day():
    reservations = ReservationService()
    first = reservations.create_reservation({"member_id": 1, "book_id": 1, "created_at": NOW})
    second = reservations.create_reservation({"member_id": 2, "book_id": 1, "created_at": NOW})
    next_day = reservations.create_reservation({"member_id": 3, "book_id": 1, "created_at": NOW + timedelta(days=1)})
    assert first.reservation_id == "RES-20240601-001"
    assert second.reservation_id == "RES-20240601-002"
    assert next_day.reservation_id == "RES-20240602-001"


def test_default_wait_days_is_applied():
    reservations = ReservationService(default_wait_days=3)
    reservation = reservations.create_reservation({"member_id": 1, "book_id": 1, "created_at": NOW})
    assert reservation.expires_at == NOW + timedelta(days=3)


def test_invalid_reservation_is_not_stored():
    reservations = ReservationService()
    with pytest.raises(ValidationFailedError, match="Max wait days must be between 1 and 30"):
        reservations.create_reservation({"member_id": 1, "book_id": 1, "max_wait_days": 40})
    assert reservations.get_all_reservations() == []


def test_queue_orders_by_priority_then_creation():
    reservations = ReservationService()
    specs = [(1, 1.0, 0), (2, 3.0, 1), (3, 3.0, 2), (4, 2.0, 3)]
    for member_id, priority, minutes in specs:
        reservation = reservations.create_reservation(
            {"member_id": member_id, "book_id": 9, "created_at": NOW + timedelta(minutes=minutes)}
        )
        reservation.priority_score = priority
        reservation.queue(0)
    queue = reservations.rerank_queue(9)
    assert [r.member_id for r in queue] == [2, 3, 4, 1]
    assert [r.queue_position for r in queue] == [1, 2, 3, 4]


def test_expire_stale_reservations():
    reservations = ReservationService()
    stale = reservations.create_reservation({"member_id": 1, "book_id": 1, "created_at": NOW})
    fresh = reservations.create_reservation({"member_id": 2, "book_id": 1, "created_at": NOW + timedelta(days=10)})
    expired = reservations.expire_stale_reservations(now=NOW + timedelta(days=15))
    assert expired == [stale]
    assert stale.status == "expired"
    assert fresh.status == "pending"
    assert reservations.get_active_reservations() == [fresh]
