"""Reservation entity: hold requests and the priority score that orders the queue."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from ..core.validators import is_integer, is_number, parse_datetime, utcnow

if TYPE_CHECKING:
    from .member import Member

DEFAULT_WAIT_DAYS = 14
MAX_PRIORITY = 10.0
TYPE_WEIGHTS = {"standard": 1.0, "premium": 2.0, "group": 1.5}

DateValue = Union[datetime, str, None]


class ReservationType(str, Enum):
    STANDARD = "standard"
    PREMIUM = "premium"
    GROUP = "group"


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    QUEUED = "queued"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


ACTIVE_STATUSES = frozenset(
    {ReservationStatus.PENDING.value, ReservationStatus.CONFIRMED.value, ReservationStatus.QUEUED.value}
)
# Queued reservations wait on a loan and never lapse on their own.
EXPIRING_STATUSES = frozenset({ReservationStatus.PENDING.value, ReservationStatus.CONFIRMED.value})


def _default_notifications() -> Dict[str, bool]:
    return {"email": True, "sms": False, "push": True}


@dataclass
class Reservation:
    """A member's request to hold a book.

    ``reservation_id`` has the form ``RES-YYYYMMDD-NNN`` and is assigned by
    ``ReservationService``.  A reservation starts ``pending`` and moves to
    ``confirmed`` (book available), ``queued`` (book on loan, with a
    1-based ``queue_position``), ``cancelled`` or ``expired``.
    """

    reservation_id: Optional[str] = None
    member_id: Optional[int] = None
    book_id: Optional[int] = None
    reservation_type: str = ReservationType.STANDARD.value
    status: str = ReservationStatus.PENDING.value
    created_at: DateValue = field(default_factory=utcnow)
    expires_at: DateValue = None
    preferred_pickup_date: DateValue = None
    max_wait_days: int = DEFAULT_WAIT_DAYS
    queue_position: int = 0
    priority_score: float = 0
    estimated_availability_date: Optional[datetime] = None
    pickup_window_start: Optional[datetime] = None
    pickup_window_end: Optional[datetime] = None
    fee_paid: float = 0
    notification_preferences: Dict[str, bool] = field(default_factory=_default_notifications)
    group_reservation: Optional[Dict[str, Any]] = None
    special_requests: Dict[str, Any] = field(default_factory=dict)
    payment_info: Dict[str, Any] = field(default_factory=dict)

    UPDATABLE_FIELDS = (
        "reservation_type",
        "status",
        "preferred_pickup_date",
        "max_wait_days",
        "queue_position",
        "priority_score",
        "estimated_availability_date",
        "pickup_window_start",
        "pickup_window_end",
        "fee_paid",
        "notification_preferences",
        "group_reservation",
        "special_requests",
        "payment_info",
    )

    def __post_init__(self) -> None:
        for attr in ("reservation_type", "status"):
            value = getattr(self, attr)
            if isinstance(value, Enum):
                setattr(self, attr, value.value)
        self.created_at = parse_datetime(self.created_at) or self.created_at
        self.preferred_pickup_date = parse_datetime(self.preferred_pickup_date) or self.preferred_pickup_date
        if self.expires_at is None:
            self.expires_at = self.calculate_expiration_date()
        else:
            self.expires_at = parse_datetime(self.expires_at) or self.expires_at

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Reservation":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})

    @staticmethod
    def format_reservation_id(day: datetime, sequence: int) -> str:
        return f"RES-{day:%Y%m%d}-{sequence:03d}"

    def calculate_expiration_date(self) -> Optional[datetime]:
        created = parse_datetime(self.created_at)
        if created is None:
            return None
        wait_days = self.max_wait_days if is_integer(self.max_wait_days) else DEFAULT_WAIT_DAYS
        return created + timedelta(days=wait_days)

    def validate(self) -> List[str]:
        errors: List[str] = []
        if not is_integer(self.member_id) or self.member_id <= 0:
            errors.append("Valid member ID is required")
        if not is_integer(self.book_id) or self.book_id <= 0:
            errors.append("Valid book ID is required")
        if self.reservation_type not in {t.value for t in ReservationType}:
            errors.append("Reservation type must be standard, premium, or group")
        if self.status not in {s.value for s in ReservationStatus}:
            errors.append("Invalid reservation status")
        if not is_integer(self.max_wait_days) or not 1 <= self.max_wait_days <= 30:
            errors.append("Max wait days must be between 1 and 30")
        if not is_number(self.fee_paid) or not 0 <= self.fee_paid <= 100:
            errors.append("Fee paid must be between 0 and 100")
        if self.preferred_pickup_date is not None and not isinstance(self.preferred_pickup_date, datetime):
            errors.append("Invalid preferred pickup date")
        if self.group_reservation and not self.validate_group_reservation():
            errors.append("Invalid group reservation data")
        return errors

    def validate_group_reservation(self) -> bool:
        group = self.group_reservation
        if not group:
            return True
        if not isinstance(group, dict):
            return False
        group_id = group.get("group_id")
        group_size = group.get("group_size")
        coordinator = group.get("coordinator_member_id")
        if not group_id or not isinstance(group_id, str):
            return False
        if not is_integer(group_size) or not 2 <= group_size <= 10:
            return False
        if not is_integer(coordinator) or coordinator <= 0:
            return False
        return True

    def update(self, data: Dict[str, Any]) -> None:
        for name in self.UPDATABLE_FIELDS:
            if data.get(name) is not None:
                setattr(self, name, data[name])

    # state transitions
    def confirm(self, now: Optional[datetime] = None) -> None:
        """Hold the book; the pickup window of ``max_wait_days`` starts at ``now``."""
        self.status = ReservationStatus.CONFIRMED.value
        self.queue_position = 0
        if now is not None:
            wait_days = self.max_wait_days if is_integer(self.max_wait_days) else DEFAULT_WAIT_DAYS
            self.expires_at = now + timedelta(days=wait_days)

    def queue(self, position: int) -> None:
        self.status = ReservationStatus.QUEUED.value
        self.queue_position = position

    def cancel(self) -> None:
        self.status = ReservationStatus.CANCELLED.value
        self.queue_position = 0

    def expire(self) -> None:
        self.status = ReservationStatus.EXPIRED.value
        self.queue_position = 0

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.status not in EXPIRING_STATUSES or not isinstance(self.expires_at, datetime):
            return False
        return (now or utcnow()) > self.expires_at

    def calculate_priority_score(self, member: Optional["Member"] = None) -> float:
        """Compute and store the queue priority, capped at 10.

        type weight (standard 1, premium 2, group 1.5)
        + 0.3 * member priority
        + 1 for an academic priority request, + 0.5 for accessibility needs
        + 0.1 per unit of fee paid
        + 0.2 for a group reservation
        """
        score = TYPE_WEIGHTS.get(self.reservation_type, 1.0)
        if member is not None:
            score += member.calculate_priority_score() * 0.3
        requests = self.special_requests or {}
        if requests.get("academic_priority"):
            score += 1
        if requests.get("accessibility_needs"):
            score += 0.5
        score += (self.fee_paid or 0) * 0.1
        if self.group_reservation:
            score += 0.2
        self.priority_score = min(score, MAX_PRIORITY)
        return self.priority_score

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
