"""
Reusable field checks for request schemas.

The checks run as ``mode="before"`` validators so that type errors and
range errors share one client-facing message (e.g. ``"Age must be
between 12 and 120"`` for both ``"abc"`` and ``10``).
"""

from typing import Any, Optional

from pydantic import BaseModel

from ..core.validators import is_integer, is_number, parse_datetime


class MessageResponse(BaseModel):
    message: str


def as_int(value: Any) -> Optional[int]:
    """Interpret ints, integral floats and digit strings as ``int``."""
    if is_integer(value):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def as_number(value: Any) -> Optional[float]:
    if is_number(value):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def require_positive_int(value: Any, message: str) -> int:
    number = as_int(value)
    if number is None or number < 1:
        raise ValueError(message)
    return number


def require_int_in_range(value: Any, low: int, high: int, message: str) -> int:
    number = as_int(value)
    if number is None or not low <= number <= high:
        raise ValueError(message)
    return number


def require_number_in_range(value: Any, low: float, high: float, message: str) -> float:
    number = as_number(value)
    if number is None or not low <= number <= high:
        raise ValueError(message)
    return number


def require_text(value: Any, max_length: int, required_message: str, length_message: str) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(required_message)
    if not isinstance(value, str):
        raise ValueError(length_message)
    text = value.strip()
    if len(text) > max_length:
        raise ValueError(length_message)
    return text


def require_length(value: Any, low: int, high: int, message: str) -> str:
    if not isinstance(value, str) or not low <= len(value) <= high:
        raise ValueError(message)
    return value


def require_bool(value: Any, message: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in {"true", "false"}:
        return value.lower() == "true"
    raise ValueError(message)


def require_iso_date(value: Any, message: str) -> str:
    if not isinstance(value, str) or parse_datetime(value) is None:
        raise ValueError(message)
    return value
