"""Borrowing transaction entity."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..core.validators import is_integer, is_number, parse_datetime, utcnow

LOAN_PERIOD_DAYS = 14
DEFAULT_FINE_RATE = 0.50
MAX_FINE = 50.0
MAX_FINE_AMOUNT = 1000

DateValue = Union[datetime, str, None]


class TransactionStatus(str, Enum):
    ACTIVE = "active"
    RETURNED = "returned"
    CANCELLED = "cancelled"


@dataclass
class Transaction:
    """A borrow record linking a member and a book by id.

    Created ``active`` on borrow, moved to ``returned`` on return.  A
    transaction is overdue while it is active and the current time is
    past ``due_date``.  Date fields accept datetimes or ISO strings;
    strings that cannot be parsed are kept as given and reported by
    ``validate``.
    """

    transaction_id: Optional[int] = None
    member_id: Optional[int] = None
    book_id: Optional[int] = None
    status: str = TransactionStatus.ACTIVE.value
    borrowed_at: DateValue = field(default_factory=utcnow)
    due_date: DateValue = None
    returned_at: DateValue = None
    fine_amount: float = 0
    notes: str = ""
    loan_period_days: int = field(default=LOAN_PERIOD_DAYS, repr=False)

    UPDATABLE_FIELDS = ("status", "returned_at", "fine_amount", "notes")

    def __post_init__(self) -> None:
        if isinstance(self.status, TransactionStatus):
            self.status = self.status.value
        self.borrowed_at = parse_datetime(self.borrowed_at) or self.borrowed_at
        self.returned_at = parse_datetime(self.returned_at) or self.returned_at
        if self.due_date is None:
            self.due_date = self.calculate_due_date()
        else:
            self.due_date = parse_datetime(self.due_date) or self.due_date

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})

    def calculate_due_date(self) -> Optional[datetime]:
        borrowed = parse_datetime(self.borrowed_at)
        if borrowed is None:
            return None
        return borrowed + timedelta(days=self.loan_period_days)

    def validate(self) -> List[str]:
        errors: List[str] = []
        if not is_integer(self.member_id) or self.member_id <= 0:
            errors.append("Valid member ID is required")
        if not is_integer(self.book_id) or self.book_id <= 0:
            errors.append("Valid book ID is required")
        if self.status not in {s.value for s in TransactionStatus}:
            errors.append("Status must be active, returned, or cancelled")
        if self.borrowed_at is not None and not isinstance(self.borrowed_at, datetime):
            errors.append("Invalid borrowed_at date")
        if self.returned_at is not None and not isinstance(self.returned_at, datetime):
            errors.append("Invalid returned_at date")
        if self.due_date is not None and not isinstance(self.due_date, datetime):
            errors.append("Invalid due_date")
        if not is_number(self.fine_amount) or not 0 <= self.fine_amount <= MAX_FINE_AMOUNT:
            errors.append(f"Fine amount must be between 0 and {MAX_FINE_AMOUNT}")
        return errors

    def update(self, data: Dict[str, Any]) -> None:
        for name in self.UPDATABLE_FIELDS:
            if data.get(name) is not None:
                value = data[name]
                if name == "returned_at":
                    value = parse_datetime(value) or value
                setattr(self, name, value)

    def mark_returned(self, when: Optional[datetime] = None) -> None:
        self.status = TransactionStatus.RETURNED.value
        self.returned_at = when or utcnow()

    @property
    def is_active(self) -> bool:
        return self.status == TransactionStatus.ACTIVE.value

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        if not self.is_active or not isinstance(self.due_date, datetime):
            return False
        return (now or utcnow()) > self.due_date

    def calculate_days_overdue(self, now: Optional[datetime] = None) -> int:
        now = now or utcnow()
        if not self.is_overdue(now):
            return 0
        return math.ceil((now - self.due_date).total_seconds() / 86400)

    def calculate_fine(
        self,
        rate_per_day: float = DEFAULT_FINE_RATE,
        max_fine: float = MAX_FINE,
        now: Optional[datetime] = None,
    ) -> float:
        """Overdue fine: ``days_overdue * rate_per_day``, capped at ``max_fine``."""
        if not self.is_overdue(now):
            return 0
        return min(self.calculate_days_overdue(now) * rate_per_day, max_fine)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("loan_period_days", None)
        return data
