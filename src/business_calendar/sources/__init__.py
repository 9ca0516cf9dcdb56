"""Holiday sources: compiled-in jurisdiction tables and remote feeds."""

from .base import CalendarError, CountryNotSupported, HolidaySet, HolidaySource, SourceUnavailable
from .remote import RemoteHolidaySource
from .table import JURISDICTIONS, Jurisdiction, TableHolidaySource, resolve_jurisdiction

__all__ = [
    "CalendarError",
    "CountryNotSupported",
    "HolidaySet",
    "HolidaySource",
    "JURISDICTIONS",
    "Jurisdiction",
    "RemoteHolidaySource",
    "SourceUnavailable",
    "TableHolidaySource",
    "resolve_jurisdiction",
]
