"""
Business logic for reservations and the per-book reservation queue.

Reservation ids are ``RES-YYYYMMDD-NNN`` where ``NNN`` is a per-day
sequence number, so ids never collide within a process.  The queue for
a book is its ``queued`` reservations ordered by priority score
(highest first), then by creation time, then by id; queue positions
are 1-based and rewritten by ``rerank_queue`` whenever the queue
changes.
"""

import copy
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..core.exceptions import ValidationFailedError
from ..core.repository import InMemoryRepository, Repository
from ..core.validators import parse_datetime, utcnow
from ..models.reservation import DEFAULT_WAIT_DAYS, Reservation, ReservationStatus

logger = logging.getLogger(__name__)


class ReservationService:
    """Reservation storage, lookups and queue ordering."""

    def __init__(self, repository: Optional[Repository] = None, default_wait_days: int = DEFAULT_WAIT_DAYS) -> None:
        self.repository: Repository = repository if repository is not None else InMemoryRepository()
        self.default_wait_days = default_wait_days
        self._daily_sequence: Dict[str, int] = {}

    def clear(self) -> None:
        self.repository.clear()
        self._daily_sequence.clear()

    def _generate_id(self, created_at: datetime) -> str:
        day = f"{created_at:%Y%m%d}"
        while True:
            sequence = self._daily_sequence.get(day, 0) + 1
            self._daily_sequence[day] = sequence
            reservation_id = Reservation.format_reservation_id(created_at, sequence)
            if reservation_id not in self.repository:
                return reservation_id

    def create_reservation(self, data: Dict[str, Any]) -> Reservation:
        payload = dict(data)
        payload.pop("reservation_id", None)
        payload.setdefault("max_wait_days", self.default_wait_days)
        reservation = Reservation.from_dict(payload)
        errors = reservation.validate()
        if errors:
            raise ValidationFailedError(errors)
        created = parse_datetime(reservation.created_at) or utcnow()
        reservation.reservation_id = self._generate_id(created)
        self.repository.add(reservation.reservation_id, reservation)
        return reservation

    def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        return self.repository.get(reservation_id)

    def get_all_reservations(self) -> List[Reservation]:
        return self.repository.values()

    def update_reservation(self, reservation_id: str, data: Dict[str, Any]) -> Optional[Reservation]:
        reservation = self.repository.get(reservation_id)
        if reservation is None:
            return None
        staged = copy.deepcopy(reservation)
        staged.update(data)
        errors = staged.validate()
        if errors:
            raise ValidationFailedError(errors)
        reservation.update(data)
        return reservation

    def delete_reservation(self, reservation_id: str) -> bool:
        return self.repository.remove(reservation_id)

    # queries
    def get_reservations_by_member(self, member_id: int) -> List[Reservation]:
        return self.repository.find(lambda r: r.member_id == member_id)

    def get_reservations_by_book(self, book_id: int) -> List[Reservation]:
        return self.repository.find(lambda r: r.book_id == book_id)

    def get_active_reservations(self) -> List[Reservation]:
        return self.repository.find(lambda r: r.is_active)

    def get_active_reservations_for_member(self, member_id: int) -> List[Reservation]:
        return [r for r in self.get_active_reservations() if r.member_id == member_id]

    def has_active_reservation(self, member_id: int) -> bool:
        return bool(self.get_active_reservations_for_member(member_id))

    def find_active_reservation(self, member_id: int, book_id: int) -> Optional[Reservation]:
        return next(
            (r for r in self.get_active_reservations_for_member(member_id) if r.book_id == book_id),
            None,
        )

    def reserved_book_ids(self) -> set:
        return {r.book_id for r in self.get_active_reservations()}

    def get_reservation_queue(self, book_id: int) -> List[Reservation]:
        queued = [r for r in self.get_reservations_by_book(book_id) if r.status == ReservationStatus.QUEUED.value]
        return sorted(queued, key=_queue_key)

    def rerank_queue(self, book_id: int) -> List[Reservation]:
        """Rewrite 1-based ``queue_position`` for every queued reservation of a book."""
        queue = self.get_reservation_queue(book_id)
        for position, reservation in enumerate(queue, start=1):
            reservation.queue_position = position
        return queue

    def expire_stale_reservations(self, now: Optional[datetime] = None) -> List[Reservation]:
        """Mark pending and confirmed reservations past ``expires_at`` as expired."""
        expired = [r for r in self.repository.values() if r.is_expired(now)]
        for reservation in expired:
            reservation.expire()
            logger.info("Reservation %s expired", reservation.reservation_id)
        return expired


def _queue_key(reservation: Reservation):
    created = parse_datetime(reservation.created_at)
    return (-reservation.priority_score, created.timestamp() if created else 0.0, reservation.reservation_id)
