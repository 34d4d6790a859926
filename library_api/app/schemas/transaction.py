"""
Pydantic models for borrowing, returning and loan reports.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from .book import BOOK_ID_MESSAGE
from .common import require_positive_int
from .member import MEMBER_ID_MESSAGE


class BorrowRequest(BaseModel):
    """Body of ``POST /api/borrow`` and ``POST /api/return``."""

    member_id: Optional[int] = Field(None, validate_default=True, examples=[1])
    book_id: Optional[int] = Field(None, validate_default=True, examples=[1])

    @field_validator("member_id", mode="before")
    @classmethod
    def _check_member_id(cls, value: Any) -> int:
        return require_positive_int(value, MEMBER_ID_MESSAGE)

    @field_validator("book_id", mode="before")
    @classmethod
    def _check_book_id(cls, value: Any) -> int:
        return require_positive_int(value, BOOK_ID_MESSAGE)


class BorrowRead(BaseModel):
    transaction_id: int
    member_id: int
    book_id: int
    borrowed_at: datetime
    status: str

    model_config = {
        "from_attributes": True,
    }


class ReturnRead(BaseModel):
    transaction_id: int
    member_id: int
    book_id: int
    returned_at: datetime
    status: str
    fine_amount: float

    model_config = {
        "from_attributes": True,
    }


class BorrowedBook(BaseModel):
    transaction_id: int
    member_id: int
    member_name: Optional[str] = None
    book_id: int
    book_title: Optional[str] = None
    borrowed_at: datetime
    due_date: datetime


class BorrowedBookList(BaseModel):
    borrowed_books: List[BorrowedBook]


class HistoryEntry(BaseModel):
    transaction_id: int
    book_id: int
    book_title: Optional[str] = None
    borrowed_at: datetime
    returned_at: Optional[datetime] = None
    status: str


class BorrowingHistory(BaseModel):
    member_id: int
    member_name: str
    borrowing_history: List[HistoryEntry]


class OverdueBook(BorrowedBook):
    days_overdue: int


class OverdueBookList(BaseModel):
    overdue_books: List[OverdueBook]
