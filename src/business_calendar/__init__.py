"""Business-day arithmetic over jurisdiction holiday tables and remote holiday feeds."""

from .cache import DecisionCache, FetchCache
from .calendar import BusinessCalendar, to_date
from .config import CalendarConfig, CalendarConfigError
from .sources import (
    CalendarError,
    CountryNotSupported,
    HolidaySource,
    RemoteHolidaySource,
    SourceUnavailable,
    TableHolidaySource,
)

__all__ = [
    "BusinessCalendar",
    "CalendarConfig",
    "CalendarConfigError",
    "CalendarError",
    "CountryNotSupported",
    "DecisionCache",
    "FetchCache",
    "HolidaySource",
    "RemoteHolidaySource",
    "SourceUnavailable",
    "TableHolidaySource",
    "to_date",
]
