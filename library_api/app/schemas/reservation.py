"""
Pydantic models for reservation requests and queue listings.

The reservation creation response is assembled in the endpoint module
because it mixes stored values with derived blocks.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.reservation import ReservationType
from .book import BOOK_ID_MESSAGE
from .common import require_int_in_range, require_iso_date, require_number_in_range, require_positive_int
from .member import MEMBER_ID_MESSAGE


class ReservationCreate(BaseModel):
    """Body of ``POST /api/reservations``."""

    member_id: Optional[int] = Field(None, validate_default=True, examples=[1])
    book_id: Optional[int] = Field(None, validate_default=True, examples=[1])
    reservation_type: Optional[str] = Field(None, examples=["standard"])
    preferred_pickup_date: Optional[str] = Field(None, examples=["2026-11-01T10:00:00Z"])
    max_wait_days: Optional[int] = Field(None, examples=[14])
    fee_paid: Optional[float] = Field(None, examples=[0])
    notification_preferences: Optional[Dict[str, bool]] = None
    group_reservation: Optional[Dict[str, Any]] = None
    special_requests: Optional[Dict[str, Any]] = None
    payment_info: Optional[Dict[str, Any]] = None

    @field_validator("member_id", mode="before")
    @classmethod
    def _check_member_id(cls, value: Any) -> int:
        return require_positive_int(value, MEMBER_ID_MESSAGE)

    @field_validator("book_id", mode="before")
    @classmethod
    def _check_book_id(cls, value: Any) -> int:
        return require_positive_int(value, BOOK_ID_MESSAGE)

    @field_validator("reservation_type", mode="before")
    @classmethod
    def _check_type(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        if value not in {t.value for t in ReservationType}:
            raise ValueError("Reservation type must be standard, premium, or group")
        return value

    @field_validator("preferred_pickup_date", mode="before")
    @classmethod
    def _check_pickup(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return require_iso_date(value, "Preferred pickup date must be a valid ISO 8601 date")

    @field_validator("max_wait_days", mode="before")
    @classmethod
    def _check_wait(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        return require_int_in_range(value, 1, 30, "Max wait days must be between 1 and 30")

    @field_validator("fee_paid", mode="before")
    @classmethod
    def _check_fee(cls, value: Any) -> Optional[float]:
        if value is None:
            return None
        return require_number_in_range(value, 0, 100, "Fee paid must be between 0 and 100")


class ReservationRead(BaseModel):
    reservation_id: str
    member_id: int
    book_id: int
    reservation_type: str
    status: str
    queue_position: int
    priority_score: float
    created_at: datetime
    expires_at: Optional[datetime] = None
    preferred_pickup_date: Optional[datetime] = None
    estimated_availability_date: Optional[datetime] = None
    pickup_window_start: Optional[datetime] = None
    pickup_window_end: Optional[datetime] = None
    fee_paid: float
    notification_preferences: Dict[str, bool]
    group_reservation: Optional[Dict[str, Any]] = None
    special_requests: Dict[str, Any]

    model_config = {
        "from_attributes": True,
    }


class ReservationList(BaseModel):
    reservations: List[ReservationRead]


class QueueEntry(BaseModel):
    reservation_id: str
    member_id: int
    queue_position: int
    priority_score: float
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }


class ReservationQueue(BaseModel):
    book_id: int
    book_title: str
    total_in_queue: int
    queue: List[QueueEntry]
