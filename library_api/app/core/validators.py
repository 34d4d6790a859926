"""Field validators shared by the entity models and request schemas."""

import re
from datetime import datetime, timezone
from typing import Any, Optional


class ISBNValidator:
    """ISBN-10 and ISBN-13 checksum validation.

    Hyphens and whitespace are ignored.  ISBN-10 uses the weighted mod-11
    scheme with ``X`` standing for a check value of 10; ISBN-13 uses the
    alternating 1/3 weighted mod-10 scheme.
    """

    @staticmethod
    def normalize_isbn(raw: Optional[str]) -> str:
        if raw is None:
            return ""
        return re.sub(r"[-\s]", "", raw).upper()

    @staticmethod
    def is_valid_isbn10(isbn: str) -> bool:
        if not re.fullmatch(r"\d{9}[\dX]", isbn):
            return False
        total = sum(int(ch) * (10 - i) for i, ch in enumerate(isbn[:9]))
        check = 10 if isbn[9] == "X" else int(isbn[9])
        return (total + check) % 11 == 0

    @staticmethod
    def is_valid_isbn13(isbn: str) -> bool:
        if not re.fullmatch(r"\d{13}", isbn):
            return False
        total = sum(int(ch) * (1 if i % 2 == 0 else 3) for i, ch in enumerate(isbn[:12]))
        return (10 - total % 10) % 10 == int(isbn[12])

    @classmethod
    def is_valid_isbn(cls, isbn: Optional[str]) -> bool:
        s = cls.normalize_isbn(isbn)
        if len(s) == 10:
            return cls.is_valid_isbn10(s)
        if len(s) == 13:
            return cls.is_valid_isbn13(s)
        return False


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 string (or pass through a datetime).

    Naive values are taken to be UTC.  Returns ``None`` when the value
    cannot be interpreted as a date.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_integer(value: Any) -> bool:
    """True for real integers (``bool`` is not accepted)."""
    return isinstance(value, int) and not isinstance(value, bool)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
