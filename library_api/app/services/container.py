"""Wiring of the service instances that make up one running application."""

from dataclasses import dataclass
from typing import Optional

from ..core.config import Settings, settings as default_settings
from .book_service import BookService
from .circulation_service import CirculationService
from .member_service import MemberService
from .reservation_service import ReservationService
from .transaction_service import TransactionService


@dataclass
class ServiceContainer:
    members: MemberService
    books: BookService
    transactions: TransactionService
    reservations: ReservationService
    circulation: CirculationService

    @classmethod
    def build(cls, config: Optional[Settings] = None) -> "ServiceContainer":
        config = config or default_settings
        members = MemberService()
        books = BookService()
        transactions = TransactionService(
            loan_period_days=config.loan_period_days,
            fine_rate_per_day=config.fine_rate_per_day,
            max_fine=config.max_fine,
        )
        reservations = ReservationService(default_wait_days=config.default_reservation_wait_days)
        circulation = CirculationService(
            members,
            books,
            transactions,
            reservations,
            max_active_reservations=config.max_active_reservations,
        )
        return cls(members, books, transactions, reservations, circulation)

    def clear(self) -> None:
        """Drop all stored data (used between tests)."""
        self.members.clear()
        self.books.clear()
        self.transactions.clear()
        self.reservations.clear()
