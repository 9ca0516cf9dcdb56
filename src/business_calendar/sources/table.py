"""Holiday tables for registered jurisdictions, backed by the ``holidays`` package."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Mapping

import holidays

from .base import CountryNotSupported, HolidaySet, HolidaySource, SourceUnavailable

_LOGGER = logging.getLogger("business_calendar.sources.table")


@dataclass(frozen=True, slots=True)
class Jurisdiction:
    """A registered holiday table and its observance policy."""

    code: str
    country: str
    observed: bool = True


JURISDICTIONS: Mapping[str, Jurisdiction] = {
    entry.code: entry
    for entry in (
        Jurisdiction("US", "US"),
        # Bank holidays falling on a weekend are not moved to the next weekday.
        Jurisdiction("GB", "GB", observed=False),
        Jurisdiction("CA", "CA"),
        Jurisdiction("DE", "DE", observed=False),
    )
}


def resolve_jurisdiction(code: str) -> Jurisdiction:
    """Return the registered jurisdiction for ``code`` or raise ``CountryNotSupported``."""

    normalized = str(code).strip().upper()
    jurisdiction = JURISDICTIONS.get(normalized)
    if jurisdiction is None:
        supported = ", ".join(sorted(JURISDICTIONS))
        raise CountryNotSupported(
            f"No holiday table for jurisdiction {code!r}. Supported: {supported}"
        )
    return jurisdiction


class TableHolidaySource(HolidaySource):
    """Looks up holidays for one jurisdiction, one year at a time."""

    def __init__(self, jurisdiction: Jurisdiction) -> None:
        self.jurisdiction = jurisdiction
        self.name = f"table:{jurisdiction.code}"
        self._years: Dict[int, HolidaySet] = {}
        self._lock = threading.Lock()

    def holidays_for(self, year: int) -> HolidaySet:
        with self._lock:
            cached = self._years.get(year)
            if cached is not None:
                return cached
            resolved = self._build(year)
            self._years[year] = resolved
            return resolved

    def _build(self, year: int) -> HolidaySet:
        # Neighbouring years are included so observed days that cross the
        # year boundary (e.g. New Year's Day observed on Dec 31) are kept.
        try:
            table = holidays.country_holidays(
                self.jurisdiction.country,
                years=range(year - 1, year + 2),
                observed=self.jurisdiction.observed,
            )
        except (NotImplementedError, KeyError) as exc:
            raise SourceUnavailable(
                f"holiday table missing for {self.jurisdiction.code}"
            ) from exc
        resolved = frozenset(day for day in table.keys() if day.year == year)
        _LOGGER.debug(
            "loaded %s holidays for %s/%s", len(resolved), self.jurisdiction.code, year
        )
        return resolved


__all__ = ["JURISDICTIONS", "Jurisdiction", "TableHolidaySource", "resolve_jurisdiction"]
