"""
Compound library operations spanning several services.

Borrowing, returning and reserving each change a transaction or
reservation together with member and book state.  ``CirculationService``
performs those changes under one lock and inside a ``UnitOfWork`` so
that either every change is applied or none is.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from ..core.exceptions import ConflictError, NotFoundError, ValidationFailedError
from ..core.validators import utcnow
from ..models.book import Book
from ..models.member import Member
from ..models.reservation import Reservation, ReservationStatus
from ..models.transaction import Transaction
from .book_service import BookService
from .member_service import MemberService
from .reservation_service import ReservationService
from .transaction_service import TransactionService
from .unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

DEFAULT_MAX_ACTIVE_RESERVATIONS = 3
# Used when a queued book has no active loan to derive a date from.
FALLBACK_AVAILABILITY_DAYS = 7
PICKUP_WINDOW_DAYS = 2


@dataclass
class ReservationOutcome:
    reservation: Reservation
    book: Book
    member: Member
    queue_length: int


def _reservation_conflict(field: str, error: str, details: str, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "validation_errors": [{"field": field, "error": error, "details": details}],
    }
    body.update(extra)
    return body


class CirculationService:
    """Coordinates members, books, transactions and reservations."""

    def __init__(
        self,
        members: MemberService,
        books: BookService,
        transactions: TransactionService,
        reservations: ReservationService,
        max_active_reservations: int = DEFAULT_MAX_ACTIVE_RESERVATIONS,
    ) -> None:
        self.members = members
        self.books = books
        self.transactions = transactions
        self.reservations = reservations
        self.max_active_reservations = max_active_reservations
        self._lock = threading.RLock()

    # lookups
    def require_member(self, member_id: int) -> Member:
        member = self.members.get_member(member_id)
        if member is None:
            raise NotFoundError(f"member with id: {member_id} was not found")
        return member

    def require_book(self, book_id: int) -> Book:
        book = self.books.get_book(book_id)
        if book is None:
            raise NotFoundError(f"book with id: {book_id} was not found")
        return book

    # borrowing
    def borrow_book(self, member_id: int, book_id: int) -> Transaction:
        """Create an active transaction and flag member and book accordingly."""
        with self._lock, UnitOfWork() as uow:
            self.require_member(member_id)
            book = self.require_book(book_id)
            if self.transactions.has_active_borrow(member_id):
                raise ConflictError(f"member with id: {member_id} has already borrowed a book")
            if self.transactions.is_book_currently_borrowed(book_id):
                raise ConflictError(f"book with id: {book_id} is currently borrowed")
            if not book.is_available:
                raise ConflictError(f"book with id: {book_id} is not available")

            uow.track(self.members.repository, member_id)
            uow.track(self.books.repository, book_id)
            transaction = self.transactions.borrow_book(member_id, book_id)
            uow.track_new(self.transactions.repository, transaction.transaction_id)

            self.members.update_member(member_id, {"has_borrowed": True})
            self.books.update_book(book_id, {"is_available": False})
            book.increment_borrowing_count()
            return transaction

    def return_book(self, member_id: int, book_id: int, now: Optional[datetime] = None) -> Transaction:
        """Close the loan, release member and book, and promote the queue head.

        Promotion is advisory: the book stays available and ``borrow_book``
        does not check confirmed reservations.  The hold lapses after the
        reservation's ``max_wait_days``.
        """
        now = now or utcnow()
        with self._lock, UnitOfWork() as uow:
            for transaction in self.transactions.get_transactions_by_member(member_id):
                if transaction.is_active and transaction.book_id == book_id:
                    uow.track(self.transactions.repository, transaction.transaction_id)
            transaction = self.transactions.return_book(member_id, book_id, now)

            if self.members.member_exists(member_id):
                uow.track(self.members.repository, member_id)
                self.members.update_member(member_id, {"has_borrowed": False})
            if self.books.get_book(book_id) is not None:
                uow.track(self.books.repository, book_id)
                self.books.update_book(book_id, {"is_available": True})
                self._promote_queue_head(uow, book_id, now)
            return transaction

    def _promote_queue_head(self, uow: UnitOfWork, book_id: int, now: datetime) -> Optional[Reservation]:
        queue = self.reservations.get_reservation_queue(book_id)
        if not queue:
            return None
        for reservation in queue:
            uow.track(self.reservations.repository, reservation.reservation_id)
        head = queue[0]
        head.confirm(now)
        head.estimated_availability_date = now
        self.reservations.rerank_queue(book_id)
        logger.info("Reservation %s promoted to confirmed for book %s", head.reservation_id, book_id)
        return head

    def _expire_stale_reservations(self, uow: UnitOfWork, now: datetime) -> None:
        """Expire lapsed reservations and pass each released book to its queue."""
        stale = [r for r in self.reservations.get_active_reservations() if r.is_expired(now)]
        if not stale:
            return
        for reservation in stale:
            uow.track(self.reservations.repository, reservation.reservation_id)
        released = {r.book_id for r in stale if r.status == ReservationStatus.CONFIRMED.value}
        self.reservations.expire_stale_reservations(now)
        for book_id in released:
            book = self.books.get_book(book_id)
            if book is None or not book.is_available or self._has_confirmed_hold(book_id):
                continue
            self._promote_queue_head(uow, book_id, now)

    def _has_confirmed_hold(self, book_id: int) -> bool:
        return any(
            r.status == ReservationStatus.CONFIRMED.value for r in self.reservations.get_reservations_by_book(book_id)
        )

    # reservations
    def reserve_book(self, data: Dict[str, Any], now: Optional[datetime] = None) -> ReservationOutcome:
        """Place a reservation: confirmed when the book is available, queued otherwise."""
        now = now or utcnow()
        member_id = data.get("member_id")
        book_id = data.get("book_id")
        with self._lock, UnitOfWork() as uow:
            member = self.require_member(member_id)
            book = self.require_book(book_id)
            self._expire_stale_reservations(uow, now)

            if self.reservations.find_active_reservation(member_id, book_id) is not None:
                message = "Member already has an active reservation for this book"
                raise ConflictError(
                    message,
                    error="reservation_conflict",
                    details=_reservation_conflict("member_id", "member_has_active_reservation", message),
                )

            active_count = len(self.reservations.get_active_reservations_for_member(member_id))
            if active_count >= self.max_active_reservations:
                logger.warning("Member %s hit the reservation limit (%d)", member_id, self.max_active_reservations)
                raise ConflictError(
                    "Member has reached maximum active reservations limit",
                    error="reservation_conflict",
                    details=_reservation_conflict(
                        "member_id",
                        "member_has_active_reservation",
                        f"Member already has {active_count} active reservations "
                        f"(limit: {self.max_active_reservations})",
                    ),
                )

            try:
                reservation = self.reservations.create_reservation({**data, "created_at": now})
            except ValidationFailedError as exc:
                raise ValidationFailedError(
                    exc.errors,
                    error="reservation_conflict",
                    details=_reservation_conflict(
                        "general",
                        "validation_failed",
                        exc.message,
                        suggested_alternatives={
                            "alternative_books": [],
                            "alternative_dates": [],
                            "upgrade_options": ["premium_reservation", "group_reservation"],
                        },
                    ),
                ) from exc
            uow.track_new(self.reservations.repository, reservation.reservation_id)
            reservation.calculate_priority_score(member)

            if book.is_available:
                reservation.confirm(now)
                reservation.estimated_availability_date = now
                queue_length = 0
            else:
                for queued in self.reservations.get_reservation_queue(book_id):
                    uow.track(self.reservations.repository, queued.reservation_id)
                reservation.queue(0)
                queue_length = len(self.reservations.rerank_queue(book_id))
                loan = self.transactions.get_active_transaction_for_book(book_id)
                if loan is not None and isinstance(loan.due_date, datetime):
                    reservation.estimated_availability_date = loan.due_date
                else:
                    reservation.estimated_availability_date = now + timedelta(days=FALLBACK_AVAILABILITY_DAYS)

            if isinstance(reservation.preferred_pickup_date, datetime):
                reservation.pickup_window_start = reservation.preferred_pickup_date
                reservation.pickup_window_end = reservation.preferred_pickup_date + timedelta(days=PICKUP_WINDOW_DAYS)

            uow.track(self.books.repository, book_id)
            book.increment_reservation_count()
            logger.info(
                "Reservation %s for member %s on book %s is %s (priority %.2f)",
                reservation.reservation_id,
                member_id,
                book_id,
                reservation.status,
                reservation.priority_score,
            )
            return ReservationOutcome(reservation=reservation, book=book, member=member, queue_length=queue_length)

    def cancel_reservation(self, reservation_id: str) -> Reservation:
        with self._lock, UnitOfWork() as uow:
            reservation = self.reservations.get_reservation(reservation_id)
            if reservation is None:
                raise NotFoundError(f"reservation with id: {reservation_id} was not found")
            if not reservation.is_active:
                raise ConflictError(f"reservation with id: {reservation_id} is already {reservation.status}")
            was_queued = reservation.status == ReservationStatus.QUEUED.value
            for queued in self.reservations.get_reservation_queue(reservation.book_id):
                uow.track(self.reservations.repository, queued.reservation_id)
            uow.track(self.reservations.repository, reservation_id)
            reservation.cancel()
            if was_queued:
                self.reservations.rerank_queue(reservation.book_id)
            logger.info("Reservation %s cancelled", reservation_id)
            return reservation

    # deletion rules
    def delete_member(self, member_id: int) -> None:
        with self._lock, UnitOfWork() as uow:
            member = self.require_member(member_id)
            if member.has_borrowed:
                raise ConflictError(
                    f"cannot delete member with id: {member_id}, member has an active book borrowing"
                )
            held = self.reservations.get_active_reservations_for_member(member_id)
            touched_books = {reservation.book_id for reservation in held}
            for book_id in touched_books:
                for queued in self.reservations.get_reservation_queue(book_id):
                    uow.track(self.reservations.repository, queued.reservation_id)
            for reservation in held:
                uow.track(self.reservations.repository, reservation.reservation_id)
                reservation.cancel()
            for book_id in touched_books:
                self.reservations.rerank_queue(book_id)
            uow.track(self.members.repository, member_id)
            self.members.delete_member(member_id)

    def delete_book(self, book_id: int) -> None:
        with self._lock:
            self.require_book(book_id)
            if self.transactions.is_book_currently_borrowed(book_id):
                raise ConflictError(f"cannot delete book with id: {book_id}, book is currently borrowed")
            if book_id in self.reservations.reserved_book_ids():
                raise ConflictError(f"cannot delete book with id: {book_id}, book has active reservations")
            self.books.delete_book(book_id)
