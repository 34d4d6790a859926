from datetime import datetime, timedelta, timezone

import pytest

from library_api.app.core.validators import ISBNValidator, parse_datetime
from library_api.app.models import Book, Member, Reservation, Transaction


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


# ISBN -----------------------------------------------------------------


@pytest.mark.parametrize("isbn", ["978-0-13-468599-1", "978-0743273565", "0-8044-2957-X", "0306406152"])
def test_valid_isbns(isbn):
    assert ISBNValidator.is_valid_isbn(isbn)


@pytest.mark.parametrize("isbn", ["978-0-13-468599-2", "0306406153", "12345", "", None, "97801346859AB"])
def test_invalid_isbns(isbn):
    assert not ISBNValidator.is_valid_isbn(isbn)


def test_parse_datetime_treats_naive_values_as_utc():
    parsed = parse_datetime("2024-01-02T03:04:05")
    assert parsed == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert parse_datetime("2024-01-02T03:04:05Z") == parsed
    assert parse_datetime("not a date") is None
    assert parse_datetime(None) is None


# Member ---------------------------------------------------------------


@pytest.mark.parametrize("age", [12, 30, 120])
def test_member_accepts_ages_in_range(age):
    assert Member(name="Jane", age=age).validate() == []


@pytest.mark.parametrize("age", [11, 121, "30", None])
def test_member_rejects_ages_out_of_range(age):
    assert "Age must be between 12 and 120" in Member(name="Jane", age=age).validate()


def test_member_name_rules():
    assert Member(name="", age=30).validate() == ["Name is required"]
    assert Member(name="x" * 101, age=30).validate() == ["Name must be between 1 and 100 characters"]
    assert Member(name="x" * 100, age=30).validate() == []


def test_member_update_skips_unknown_and_none_values():
    member = Member(member_id=1, name="Jane", age=30)
    member.update({"name": "Janet", "age": None, "member_id": 5})
    assert member.name == "Janet"
    assert member.age == 30
    assert member.member_id == 1


def test_member_priority_score():
    assert Member(name="a", age=15).calculate_priority_score() == 1.0
    assert Member(name="a", age=30).calculate_priority_score() == 1.5
    assert Member(name="a", age=70, has_borrowed=True).calculate_priority_score() == 3.0


# Book -----------------------------------------------------------------


def test_book_validation_collects_every_error():
    errors = Book(title="", author="", isbn="123", rating=7, pages=-1).validate()
    assert errors == [
        "Title is required",
        "Author is required",
        "Invalid ISBN format",
        "Rating must be between 0 and 5",
        "Pages must be between 0 and 10000",
    ]


def test_book_without_isbn_is_valid():
    assert Book(title="X", author="Y").validate() == []


def test_popularity_score_for_new_book():
    book = Book(title="X", author="Y", rating=4, created_at=NOW)
    score = book.update_popularity_score(now=NOW)
    # rating term 2.0 + recency term (364/365 * 0.5)
    assert score == pytest.approx(2.0 + 0.5 * 364 / 365)


def test_popularity_score_grows_with_borrows_and_is_capped():
    book = Book(title="X", author="Y", rating=5, created_at=NOW - timedelta(days=400))
    base = book.update_popularity_score(now=NOW)
    book.borrowing_count = 3
    assert book.update_popularity_score(now=NOW) > base
    book.borrowing_count = 10_000
    book.reservation_count = 10_000
    assert book.update_popularity_score(now=NOW) == 10.0


# Transaction ----------------------------------------------------------


def test_due_date_is_loan_period_after_borrow():
    transaction = Transaction(member_id=1, book_id=1, borrowed_at=NOW)
    assert transaction.due_date == NOW + timedelta(days=14)


def test_string_dates_are_parsed():
    transaction = Transaction(member_id=1, book_id=1, borrowed_at="2024-06-01T12:00:00Z")
    assert transaction.borrowed_at == NOW
    assert transaction.validate() == []


def test_overdue_and_days_overdue():
    transaction = Transaction(member_id=1, book_id=1, borrowed_at=NOW)
    assert not transaction.is_overdue(NOW + timedelta(days=14))
    later = NOW + timedelta(days=16, hours=1)
    assert transaction.is_overdue(later)
    assert transaction.calculate_days_overdue(later) == 3


def test_fine_is_capped():
    transaction = Transaction(member_id=1, book_id=1, borrowed_at=NOW)
    due = transaction.due_date
    assert transaction.calculate_fine(now=due + timedelta(days=4)) == pytest.approx(2.0)
    assert transaction.calculate_fine(now=due + timedelta(days=200)) == 50


def test_returned_transaction_is_never_overdue():
    transaction = Transaction(member_id=1, book_id=1, borrowed_at=NOW)
    transaction.mark_returned(NOW + timedelta(days=1))
    assert transaction.status == "returned"
    assert not transaction.is_overdue(NOW + timedelta(days=100))
    assert transaction.calculate_fine(now=NOW + timedelta(days=100)) == 0


def test_transaction_validation():
    errors = Transaction(member_id=0, book_id=None, status="lost", fine_amount=2000).validate()
    assert errors == [
        "Valid member ID is required",
        "Valid book ID is required",
        "Status must be active, returned, or cancelled",
        "Fine amount must be between 0 and 1000",
    ]


# Reservation ----------------------------------------------------------


def test_reservation_id_format():
    assert Reservation.format_reservation_id(NOW, 7) == "RES-20240601-007"


def test_expiration_follows_max_wait_days():
    reservation = Reservation(member_id=1, book_id=1, created_at=NOW, max_wait_days=5)
    assert reservation.expires_at == NOW + timedelta(days=5)
    assert Reservation(member_id=1, book_id=1, created_at=NOW).expires_at == NOW + timedelta(days=14)


def test_reservation_priority_score():
    member = Member(name="Old", age=70, has_borrowed=True)
    reservation = Reservation(
        member_id=1,
        book_id=1,
        reservation_type="premium",
        fee_paid=10,
        special_requests={"academic_priority": True},
    )
    # premium 2 + member 3.0 * 0.3 + academic 1 + fee 10 * 0.1
    assert reservation.calculate_priority_score(member) == pytest.approx(4.9)


def test_reservation_priority_score_is_clamped():
    member = Member(name="Old", age=70, has_borrowed=True)
    reservation = Reservation(
        member_id=1,
        book_id=1,
        reservation_type="premium",
        fee_paid=100,
        special_requests={"academic_priority": True, "accessibility_needs": True},
        group_reservation={"group_id": "G1", "group_size": 3, "coordinator_member_id": 1},
    )
    assert reservation.calculate_priority_score(member) == 10.0


def test_reservation_validation():
    errors = Reservation(member_id=1, book_id=1, reservation_type="vip", max_wait_days=31, fee_paid=-1).validate()
    assert errors == [
        "Reservation type must be standard, premium, or group",
        "Max wait days must be between 1 and 30",
        "Fee paid must be between 0 and 100",
    ]


@pytest.mark.parametrize(
    "group, valid",
    [
        ({"group_id": "G1", "group_size": 2, "coordinator_member_id": 1}, True),
        ({"group_id": "G1", "group_size": 11, "coordinator_member_id": 1}, False),
        ({"group_id": "", "group_size": 3, "coordinator_member_id": 1}, False),
        ({"group_id": "G1", "group_size": 3, "coordinator_member_id": 0}, False),
    ],
)
def test_group_reservation_shape(group, valid):
    reservation = Reservation(member_id=1, book_id=1, reservation_type="group", group_reservation=group)
    assert reservation.validate_group_reservation() is valid


def test_pending_and_confirmed_reservations_expire():
    reservation = Reservation(member_id=1, book_id=1, created_at=NOW)
    later = NOW + timedelta(days=15)
    assert reservation.is_expired(later)
    reservation.confirm()
    assert reservation.is_expired(later)
    reservation.queue(1)
    assert not reservation.is_expired(later)
    reservation.cancel()
    assert not reservation.is_expired(later)


def test_confirm_restarts_the_pickup_window():
    reservation = Reservation(member_id=1, book_id=1, created_at=NOW, max_wait_days=3)
    promoted_at = NOW + timedelta(days=10)
    reservation.confirm(promoted_at)
    assert reservation.expires_at == promoted_at + timedelta(days=3)
    assert not reservation.is_expired(promoted_at + timedelta(days=2))
