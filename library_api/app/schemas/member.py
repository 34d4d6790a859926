"""
Pydantic models for member data.

``MemberCreate`` and ``MemberUpdate`` validate incoming payloads;
``MemberRead`` is the full representation returned by most member
routes, ``MemberSummary`` the shortened form used in listings.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from .common import require_bool, require_int_in_range, require_positive_int, require_text

AGE_MESSAGE = "Age must be between 12 and 120"
NAME_REQUIRED = "Name is required"
NAME_LENGTH = "Name must be between 1 and 100 characters"
MEMBER_ID_MESSAGE = "Member ID must be a positive integer"


class MemberCreate(BaseModel):
    """Schema for registering a member.

    ``member_id`` may be omitted, in which case the service assigns the
    next free id.
    """

    member_id: Optional[int] = Field(None, examples=[1])
    name: Optional[str] = Field(None, validate_default=True, examples=["Alice"])
    age: Optional[int] = Field(None, validate_default=True, examples=[22])

    @field_validator("member_id", mode="before")
    @classmethod
    def _check_member_id(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        return require_positive_int(value, MEMBER_ID_MESSAGE)

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, value: Any) -> str:
        return require_text(value, 100, NAME_REQUIRED, NAME_LENGTH)

    @field_validator("age", mode="before")
    @classmethod
    def _check_age(cls, value: Any) -> int:
        return require_int_in_range(value, 12, 120, AGE_MESSAGE)


class MemberUpdate(BaseModel):
    """Schema for a partial member update; omitted fields stay unchanged."""

    name: Optional[str] = None
    age: Optional[int] = None
    has_borrowed: Optional[bool] = None

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return require_text(value, 100, NAME_REQUIRED, NAME_LENGTH)

    @field_validator("age", mode="before")
    @classmethod
    def _check_age(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        return require_int_in_range(value, 12, 120, AGE_MESSAGE)

    @field_validator("has_borrowed", mode="before")
    @classmethod
    def _check_has_borrowed(cls, value: Any) -> Optional[bool]:
        if value is None:
            return None
        return require_bool(value, "has_borrowed must be a boolean")


class MemberRead(BaseModel):
    member_id: int
    name: str
    age: int
    has_borrowed: bool

    model_config = {
        "from_attributes": True,
    }


class MemberSummary(BaseModel):
    member_id: int
    name: str
    age: int

    model_config = {
        "from_attributes": True,
    }


class MemberList(BaseModel):
    members: List[MemberSummary]
