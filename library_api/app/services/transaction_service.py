"""
Business logic for borrowing transactions.

The ``TransactionService`` enforces the two borrowing rules by scanning
active transactions: a member holds at most one active borrow and a
book has at most one borrower.  It does not touch member or book
flags; ``CirculationService`` keeps those consistent.
"""

import copy
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..core.exceptions import ConflictError, ValidationFailedError
from ..core.repository import InMemoryRepository, Repository
from ..models.transaction import (
    DEFAULT_FINE_RATE,
    LOAN_PERIOD_DAYS,
    MAX_FINE,
    Transaction,
    TransactionStatus,
)

logger = logging.getLogger(__name__)


class TransactionService:
    """Borrow/return bookkeeping."""

    def __init__(
        self,
        repository: Optional[Repository] = None,
        loan_period_days: int = LOAN_PERIOD_DAYS,
        fine_rate_per_day: float = DEFAULT_FINE_RATE,
        max_fine: float = MAX_FINE,
    ) -> None:
        self.repository: Repository = repository if repository is not None else InMemoryRepository()
        self.loan_period_days = loan_period_days
        self.fine_rate_per_day = fine_rate_per_day
        self.max_fine = max_fine
        self._next_id = 1

    def clear(self) -> None:
        self.repository.clear()
        self._next_id = 1

    def create_transaction(self, data: Dict[str, Any]) -> Transaction:
        """Store a new transaction under the next sequential id."""
        payload = dict(data)
        payload.pop("transaction_id", None)
        payload.setdefault("loan_period_days", self.loan_period_days)
        transaction = Transaction.from_dict(payload)
        errors = transaction.validate()
        if errors:
            raise ValidationFailedError(errors)
        while self._next_id in self.repository:
            self._next_id += 1
        transaction.transaction_id = self._next_id
        self._next_id += 1
        self.repository.add(transaction.transaction_id, transaction)
        return transaction

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        return self.repository.get(transaction_id)

    def get_all_transactions(self) -> List[Transaction]:
        return self.repository.values()

    def update_transaction(self, transaction_id: int, data: Dict[str, Any]) -> Optional[Transaction]:
        transaction = self.repository.get(transaction_id)
        if transaction is None:
            return None
        staged = copy.deepcopy(transaction)
        staged.update(data)
        errors = staged.validate()
        if errors:
            raise ValidationFailedError(errors)
        transaction.update(data)
        return transaction

    def delete_transaction(self, transaction_id: int) -> bool:
        return self.repository.remove(transaction_id)

    # queries
    def get_active_transactions(self) -> List[Transaction]:
        return self.repository.find(lambda t: t.is_active)

    def get_transactions_by_member(self, member_id: int) -> List[Transaction]:
        return self.repository.find(lambda t: t.member_id == member_id)

    def get_transactions_by_book(self, book_id: int) -> List[Transaction]:
        return self.repository.find(lambda t: t.book_id == book_id)

    def get_active_transaction_for_book(self, book_id: int) -> Optional[Transaction]:
        return next((t for t in self.get_active_transactions() if t.book_id == book_id), None)

    def get_overdue_books(self, now: Optional[datetime] = None) -> List[Transaction]:
        return [t for t in self.get_active_transactions() if t.is_overdue(now)]

    def has_active_borrow(self, member_id: int) -> bool:
        return any(t.member_id == member_id for t in self.get_active_transactions())

    def is_book_currently_borrowed(self, book_id: int) -> bool:
        return any(t.book_id == book_id for t in self.get_active_transactions())

    def get_borrowing_history(self, member_id: int) -> List[Transaction]:
        return self.get_transactions_by_member(member_id)

    # state transitions
    def borrow_book(self, member_id: int, book_id: int) -> Transaction:
        if self.has_active_borrow(member_id):
            raise ConflictError(f"member with id: {member_id} has already borrowed a book")
        if self.is_book_currently_borrowed(book_id):
            raise ConflictError(f"book with id: {book_id} is currently borrowed")
        transaction = self.create_transaction(
            {"member_id": member_id, "book_id": book_id, "status": TransactionStatus.ACTIVE.value}
        )
        logger.info("Member %s borrowed book %s (transaction %s)", member_id, book_id, transaction.transaction_id)
        return transaction

    def return_book(self, member_id: int, book_id: int, now: Optional[datetime] = None) -> Transaction:
        """Close the active transaction for ``member_id``/``book_id``.

        The overdue fine (if any) is recorded on the transaction before it
        is marked returned.
        """
        transaction = next(
            (t for t in self.get_active_transactions() if t.member_id == member_id and t.book_id == book_id),
            None,
        )
        if transaction is None:
            raise ConflictError(f"member with id: {member_id} has not borrowed book with id: {book_id}")
        transaction.fine_amount = transaction.calculate_fine(self.fine_rate_per_day, self.max_fine, now)
        transaction.mark_returned(now)
        logger.info(
            "Member %s returned book %s (transaction %s, fine %.2f)",
            member_id,
            book_id,
            transaction.transaction_id,
            transaction.fine_amount,
        )
        return transaction
