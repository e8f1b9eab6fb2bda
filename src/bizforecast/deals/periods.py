"""Month and quarter helpers for ``YYYY-MM`` close-month strings.

Month keys are zero-padded, so plain string comparison orders them
chronologically. The aggregation layer never reads the system clock:
callers derive ``as_of_month`` (see ``current_month``) and pass it in.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from datetime import date
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.bizforecast.deals.schemas import Deal

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"

_MONTH_RE = re.compile(MONTH_PATTERN)


class MalformedMonthError(ValueError):
    """Raised when a close-month string is not a valid ``YYYY-MM`` value."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Malformed month {value!r}: expected YYYY-MM with month 01-12")


def is_valid_month(value: str) -> bool:
    """Return True if ``value`` is a well-formed ``YYYY-MM`` string."""
    return isinstance(value, str) and _MONTH_RE.match(value) is not None


def parse_month(value: str) -> tuple[int, int]:
    """Split a ``YYYY-MM`` string into ``(year, month)``.

    Raises:
        MalformedMonthError: If the string does not match ``MONTH_PATTERN``.
    """
    if not is_valid_month(value):
        raise MalformedMonthError(value)
    year, month = value.split("-")
    return int(year), int(month)


def quarter_key(month: str) -> str:
    """Derive the quarter key for a close month, e.g. ``"2025-06"`` -> ``"2025 Q2"``.

    The year keeps its four zero-padded digits so quarter keys sort
    chronologically as strings.
    """
    _, month_num = parse_month(month)
    return f"{month[:4]} Q{math.ceil(month_num / 3)}"


def current_month(today: date | None = None) -> str:
    """Return ``today`` (default: the local date) formatted as ``YYYY-MM``."""
    today = today or date.today()
    return f"{today.year:04d}-{today.month:02d}"


def filter_from_month(deals: Iterable[Deal], as_of_month: str | None) -> list[Deal]:
    """Keep deals expected to close in ``as_of_month`` or later.

    ``as_of_month=None`` disables the filter and returns every deal.
    """
    if as_of_month is None:
        return list(deals)
    if not is_valid_month(as_of_month):
        raise MalformedMonthError(as_of_month)
    return [deal for deal in deals if deal.expected_close_month >= as_of_month]


__all__ = [
    "MONTH_PATTERN",
    "MalformedMonthError",
    "current_month",
    "filter_from_month",
    "is_valid_month",
    "parse_month",
    "quarter_key",
]
