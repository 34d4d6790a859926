"""
Reservation endpoints.

``POST /api/reservations`` places a hold: confirmed straight away when
the book is on the shelf, queued behind other members otherwise.  The
response combines the stored reservation with several informational
blocks (queue analytics, member priority factors, scheduled
notifications) whose figures are fixed placeholders.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from library_api.app.core.validators import utcnow
from library_api.app.models.reservation import Reservation, ReservationStatus
from library_api.app.schemas.book import BOOK_ID_MESSAGE
from library_api.app.schemas.member import MEMBER_ID_MESSAGE
from library_api.app.schemas.reservation import (
    ReservationCreate,
    ReservationList,
    ReservationQueue,
    ReservationRead,
)
from library_api.app.services.circulation_service import ReservationOutcome
from library_api.app.services.container import ServiceContainer

from ..deps import get_services, parse_id

router = APIRouter()


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if isinstance(value, datetime) else value


def _reservation_response(outcome: ReservationOutcome) -> Dict[str, Any]:
    reservation = outcome.reservation
    estimated = _iso(reservation.estimated_availability_date)
    special = reservation.special_requests or {}
    return {
        "reservation_id": reservation.reservation_id,
        "member_id": reservation.member_id,
        "book_id": reservation.book_id,
        "book_title": outcome.book.title,
        "reservation_status": reservation.status,
        "queue_position": reservation.queue_position,
        "estimated_availability_date": estimated,
        "priority_score": reservation.priority_score,
        "reservation_details": {
            "created_at": _iso(reservation.created_at),
            "expires_at": _iso(reservation.expires_at),
            "pickup_window_start": _iso(reservation.pickup_window_start),
            "pickup_window_end": _iso(reservation.pickup_window_end),
            "reservation_type": reservation.reservation_type,
            "fee_paid": reservation.fee_paid,
        },
        "queue_analytics": {
            "total_in_queue": outcome.queue_length,
            "avg_wait_time_days": 5.2,
            "queue_movement_rate": "moderate",
            "cancellation_rate": 0.15,
        },
        "member_priority_factors": {
            "borrowing_frequency": 0.3,
            "return_punctuality": 0.9,
            "membership_tier": "gold",
            "special_circumstances": [key for key, value in special.items() if value],
            "loyalty_score": 8.5,
        },
        "notifications_scheduled": [
            {"type": "queue_position_update", "scheduled_for": _iso(utcnow() + timedelta(days=1))},
            {"type": "availability_alert", "scheduled_for": estimated},
        ],
        "conflict_resolution": {
            "simultaneous_requests": 0,
            "resolution_method": "priority_score",
            "competing_members": [],
        },
    }


@router.post("")
async def create_reservation(
    reservation: ReservationCreate,
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    """Reserve a book for a member.

    Rejections carry ``{"error": "reservation_conflict", "message": ...,
    "details": {"validation_errors": [...]}}``: an existing open
    reservation for the same book, or the per-member limit reached.
    """
    outcome = services.circulation.reserve_book(reservation.model_dump(exclude_none=True))
    return _reservation_response(outcome)


@router.get("", response_model=ReservationList)
async def list_reservations(
    member_id: Optional[str] = None,
    book_id: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    services: ServiceContainer = Depends(get_services),
) -> dict:
    """List reservations, optionally filtered by member, book and status."""
    results: List[Reservation] = services.reservations.get_all_reservations()
    if member_id is not None:
        member_key = parse_id(member_id, MEMBER_ID_MESSAGE)
        results = [r for r in results if r.member_id == member_key]
    if book_id is not None:
        book_key = parse_id(book_id, BOOK_ID_MESSAGE)
        results = [r for r in results if r.book_id == book_key]
    if status_filter is not None:
        if status_filter not in {s.value for s in ReservationStatus}:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Status must be pending, confirmed, queued, cancelled, or expired",
            )
        results = [r for r in results if r.status == status_filter]
    return {"reservations": results}


@router.get("/queue/{book_id}", response_model=ReservationQueue)
async def get_reservation_queue(book_id: str, services: ServiceContainer = Depends(get_services)) -> dict:
    book_key = parse_id(book_id, BOOK_ID_MESSAGE)
    book = services.circulation.require_book(book_key)
    queue = services.reservations.get_reservation_queue(book_key)
    return {"book_id": book_key, "book_title": book.title, "total_in_queue": len(queue), "queue": queue}


@router.get("/{reservation_id}", response_model=ReservationRead)
async def get_reservation(reservation_id: str, services: ServiceContainer = Depends(get_services)) -> Reservation:
    reservation = services.reservations.get_reservation(reservation_id)
    if reservation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"reservation with id: {reservation_id} was not found",
        )
    return reservation


@router.post("/{reservation_id}/cancel", response_model=ReservationRead)
async def cancel_reservation(reservation_id: str, services: ServiceContainer = Depends(get_services)) -> Reservation:
    """Cancel an open reservation; later members in the queue move up."""
    return services.circulation.cancel_reservation(reservation_id)
