"""Holiday feed assembled from two HTTP endpoints (additions and removals)."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import requests

from .base import HolidaySet, HolidaySource, SourceUnavailable

_LOGGER = logging.getLogger("business_calendar.sources.remote")


class RemoteHolidaySource(HolidaySource):
    """Fetches ``{"holidays": [...]}`` lists and merges them as additions minus removals.

    Both endpoints return the complete list regardless of year, so the merged
    set is flat and ``holidays_for`` ignores its ``year`` argument.
    """

    def __init__(
        self,
        additions_url: str,
        removals_url: str,
        *,
        session: requests.Session | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.additions_url = additions_url
        self.removals_url = removals_url
        self.name = "remote"
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds

    def holidays_for(self, year: int) -> HolidaySet:
        return self.fetch()

    def fetch(self) -> HolidaySet:
        additions = self._get_dates(self.additions_url)
        removals = self._get_dates(self.removals_url)
        merged = frozenset(additions - removals)
        _LOGGER.info(
            "fetched remote holidays: %s additions, %s removals, %s merged",
            len(additions),
            len(removals),
            len(merged),
        )
        return merged

    def _get_dates(self, url: str) -> set[date]:
        try:
            response = self._session.get(url, timeout=self._timeout_seconds)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            _LOGGER.warning("holiday endpoint %s failed: %s", url, exc)
            raise SourceUnavailable(f"GET {url} failed: {exc}") from exc
        except ValueError as exc:
            raise SourceUnavailable(f"GET {url} returned a non-JSON body") from exc
        return _parse_holidays(url, payload)


def _parse_holidays(url: str, payload: Any) -> set[date]:
    if not isinstance(payload, dict):
        raise SourceUnavailable(f"{url} returned unexpected payload")
    if "holidays" not in payload:
        raise SourceUnavailable(f"{url} payload has no holidays entry")
    entries = payload["holidays"]
    if not isinstance(entries, list):
        raise SourceUnavailable(f"{url} holidays entry must be a list")
    parsed: set[date] = set()
    for entry in entries:
        try:
            parsed.add(date.fromisoformat(str(entry)))
        except ValueError as exc:
            raise SourceUnavailable(f"{url} returned invalid date {entry!r}") from exc
    return parsed


__all__ = ["RemoteHolidaySource"]
