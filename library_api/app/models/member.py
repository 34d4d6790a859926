"""Library member entity."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Optional

from ..core.validators import is_integer

NAME_MAX_LENGTH = 100
MIN_AGE = 12
MAX_AGE = 120


@dataclass
class Member:
    """A registered library member.

    Attributes:
        member_id: positive integer, assigned by ``MemberService`` when absent.
        name: display name, 1..100 characters.
        age: 12..120.
        has_borrowed: set by the borrow/return flow while the member holds
            an active loan.
    """

    member_id: Optional[int] = None
    name: str = ""
    age: int = 0
    has_borrowed: bool = False

    UPDATABLE_FIELDS = ("name", "age", "has_borrowed")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Member":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})

    def validate(self) -> List[str]:
        errors: List[str] = []
        if not isinstance(self.name, str) or not self.name.strip():
            errors.append("Name is required")
        elif len(self.name) > NAME_MAX_LENGTH:
            errors.append(f"Name must be between 1 and {NAME_MAX_LENGTH} characters")
        if not is_integer(self.age) or not MIN_AGE <= self.age <= MAX_AGE:
            errors.append(f"Age must be between {MIN_AGE} and {MAX_AGE}")
        if self.member_id is not None and not is_integer(self.member_id):
            errors.append("Member ID must be an integer")
        if not isinstance(self.has_borrowed, bool):
            errors.append("has_borrowed must be a boolean")
        return errors

    def update(self, data: Dict[str, Any]) -> None:
        """Apply the allow-listed fields present (and not ``None``) in ``data``."""
        for name in self.UPDATABLE_FIELDS:
            if data.get(name) is not None:
                setattr(self, name, data[name])

    def calculate_priority_score(self) -> float:
        """Member component of reservation priority, capped at 10."""
        score = 1.0
        if self.age > 18:
            score += 0.5
        if self.age > 65:
            score += 0.5
        if self.has_borrowed:
            score += 1
        return min(score, 10.0)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
