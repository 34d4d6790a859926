"""
Domain entities for the library.

Each entity carries its own field validation (``validate`` returns a
list of error strings), an allow-listed partial ``update`` and the
derived calculations that belong to it (fines, priority and
popularity scores).  Entities never hold references to one another;
relationships are expressed by id only.
"""

from .book import Book
from .member import Member
from .reservation import Reservation, ReservationStatus, ReservationType
from .transaction import Transaction, TransactionStatus

__all__ = [
    "Book",
    "Member",
    "Reservation",
    "ReservationStatus",
    "ReservationType",
    "Transaction",
    "TransactionStatus",
]
