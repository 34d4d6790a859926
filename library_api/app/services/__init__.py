"""
Service layer abstraction.

Each service owns one repository of entities and the business rules
for its domain.  Operations that touch more than one domain (borrow,
return, reserve) live in ``CirculationService`` so that they can be
committed or rolled back as a unit.
"""

from .book_service import BookService
from .circulation_service import CirculationService
from .container import ServiceContainer
from .member_service import MemberService
from .reservation_service import ReservationService
from .transaction_service import TransactionService
from .unit_of_work import UnitOfWork

__all__ = [
    "BookService",
    "CirculationService",
    "MemberService",
    "ReservationService",
    "ServiceContainer",
    "TransactionService",
    "UnitOfWork",
]
