"""Holiday source abstractions and the calendar error hierarchy."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import FrozenSet

HolidaySet = FrozenSet[date]


class CalendarError(Exception):
    """Generic business calendar failure."""


class CountryNotSupported(CalendarError, LookupError):
    """Raised when a calendar is built for a jurisdiction without a holiday table."""


class SourceUnavailable(CalendarError):
    """Raised when a holiday set cannot be produced by its source."""


class HolidaySource(ABC):
    """Supplies the holiday dates for one jurisdiction or feed."""

    name: str = "source"

    @abstractmethod
    def holidays_for(self, year: int) -> HolidaySet:
        """Return the holiday set that applies to ``year``."""


__all__ = [
    "CalendarError",
    "CountryNotSupported",
    "HolidaySet",
    "HolidaySource",
    "SourceUnavailable",
]
