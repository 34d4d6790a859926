"""
Borrowing endpoints: borrow, return and the loan reports.

Borrow and return delegate to ``CirculationService`` which updates the
transaction, the member and the book together.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from library_api.app.models.transaction import Transaction
from library_api.app.schemas.member import MEMBER_ID_MESSAGE
from library_api.app.schemas.transaction import (
    BorrowedBookList,
    BorrowingHistory,
    BorrowRead,
    BorrowRequest,
    OverdueBookList,
    ReturnRead,
)
from library_api.app.services.container import ServiceContainer

from ..deps import get_services, parse_id

router = APIRouter()

UNKNOWN = "Unknown"


def _member_name(services: ServiceContainer, member_id: int) -> str:
    member = services.members.get_member(member_id)
    return member.name if member else UNKNOWN


def _book_title(services: ServiceContainer, book_id: int) -> str:
    book = services.books.get_book(book_id)
    return book.title if book else UNKNOWN


def _loan_entry(services: ServiceContainer, transaction: Transaction, days_overdue: Optional[int] = None) -> dict:
    entry = {
        "transaction_id": transaction.transaction_id,
        "member_id": transaction.member_id,
        "member_name": _member_name(services, transaction.member_id),
        "book_id": transaction.book_id,
        "book_title": _book_title(services, transaction.book_id),
        "borrowed_at": transaction.borrowed_at,
        "due_date": transaction.due_date,
    }
    if days_overdue is not None:
        entry["days_overdue"] = days_overdue
    return entry


@router.post("/borrow", response_model=BorrowRead)
async def borrow_book(request: BorrowRequest, services: ServiceContainer = Depends(get_services)) -> Transaction:
    """Lend a book to a member.

    404 when either id is unknown; 400 when the member already holds a
    book or the book is on loan.
    """
    return services.circulation.borrow_book(request.member_id, request.book_id)


@router.post("/return", response_model=ReturnRead)
async def return_book(request: BorrowRequest, services: ServiceContainer = Depends(get_services)) -> Transaction:
    """Close a loan; the response carries the overdue fine, if any."""
    return services.circulation.return_book(request.member_id, request.book_id)


@router.get("/borrowed", response_model=BorrowedBookList)
async def list_borrowed_books(services: ServiceContainer = Depends(get_services)) -> dict:
    transactions = services.transactions.get_active_transactions()
    return {"borrowed_books": [_loan_entry(services, t) for t in transactions]}


@router.get("/borrow/history/{member_id}", response_model=BorrowingHistory)
async def borrowing_history(member_id: str, services: ServiceContainer = Depends(get_services)) -> dict:
    member_key = parse_id(member_id, MEMBER_ID_MESSAGE)
    member = services.members.get_member(member_key)
    if member is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"member with id: {member_key} was not found",
        )
    history = [
        {
            "transaction_id": t.transaction_id,
            "book_id": t.book_id,
            "book_title": _book_title(services, t.book_id),
            "borrowed_at": t.borrowed_at,
            "returned_at": t.returned_at,
            "status": t.status,
        }
        for t in services.transactions.get_borrowing_history(member_key)
    ]
    return {"member_id": member_key, "member_name": member.name, "borrowing_history": history}


@router.get("/borrow/overdue", response_model=OverdueBookList)
async def list_overdue_books(services: ServiceContainer = Depends(get_services)) -> dict:
    overdue = services.transactions.get_overdue_books()
    return {"overdue_books": [_loan_entry(services, t, t.calculate_days_overdue()) for t in overdue]}
