"""Holiday-aware business calendar: predicates and business-day arithmetic."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import Any, Callable, List, Literal, Mapping, MutableMapping, overload

import requests

from .cache import DEFAULT_DECISION_CAPACITY, DecisionCache, FetchCache, MetricSink
from .config import CalendarConfig
from .sources.base import CalendarError, HolidaySet, HolidaySource
from .sources.remote import RemoteHolidaySource
from .sources.table import TableHolidaySource, resolve_jurisdiction

Direction = Literal["forward", "backward"]
DateInput = date | datetime | str

_LOGGER = logging.getLogger("business_calendar.calendar")
_ONE_DAY = timedelta(days=1)
_DIRECTION_SIGNS = {"forward": 1, "backward": -1}
# Upper bound on consecutive non-business days scanned before giving up.
_MAX_SCAN_DAYS = 3660


def to_date(value: DateInput) -> date:
    """Truncate a date, datetime or ISO-8601 string to its calendar date."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        try:
            if len(stripped) == 10:
                return date.fromisoformat(stripped)
            return datetime.fromisoformat(stripped).date()
        except ValueError as exc:
            raise ValueError(f"Not an ISO-8601 date: {value!r}") from exc
    raise TypeError(f"Expected a date, datetime or ISO string, got {type(value).__name__}")


def _sign(direction: str) -> int:
    try:
        return _DIRECTION_SIGNS[direction]
    except KeyError:
        raise ValueError(
            f"Unknown direction {direction!r}; expected 'forward' or 'backward'"
        ) from None


def _resolve_config(config: CalendarConfig | Mapping[str, Any] | None) -> CalendarConfig:
    if config is None:
        return CalendarConfig()
    if isinstance(config, CalendarConfig):
        return config
    return CalendarConfig.from_mapping(config)


class BusinessCalendar:
    """Answers business-day questions for one holiday source and weekend policy.

    Build instances with :meth:`for_jurisdiction` or :meth:`for_endpoints`.
    Each instance owns its caches; they are never shared between calendars.
    """

    def __init__(
        self,
        source: HolidaySource,
        config: CalendarConfig | None = None,
        *,
        fetch_cache: FetchCache[HolidaySet] | None = None,
        decision_capacity: int = DEFAULT_DECISION_CAPACITY,
        metric_sink: MetricSink | None = None,
    ) -> None:
        self.source = source
        self.config = config or CalendarConfig()
        self._fetch_cache = fetch_cache
        self._decisions = DecisionCache(decision_capacity, metric_sink=metric_sink)
        _LOGGER.debug(
            "business calendar ready: source=%s config=%s", source.name, self.config.as_dict()
        )

    @classmethod
    def for_jurisdiction(
        cls,
        code: str,
        config: CalendarConfig | Mapping[str, Any] | None = None,
        *,
        decision_capacity: int = DEFAULT_DECISION_CAPACITY,
        metric_sink: MetricSink | None = None,
    ) -> "BusinessCalendar":
        """Calendar over a registered holiday table; unknown codes raise ``CountryNotSupported``."""

        jurisdiction = resolve_jurisdiction(code)
        return cls(
            TableHolidaySource(jurisdiction),
            _resolve_config(config),
            decision_capacity=decision_capacity,
            metric_sink=metric_sink,
        )

    @classmethod
    def for_endpoints(
        cls,
        additions_url: str,
        removals_url: str,
        config: CalendarConfig | Mapping[str, Any] | None = None,
        *,
        session: requests.Session | None = None,
        timeout_seconds: float = 10.0,
        clock: Callable[[], float] = time.time,
        decision_capacity: int = DEFAULT_DECISION_CAPACITY,
        metric_sink: MetricSink | None = None,
    ) -> "BusinessCalendar":
        """Calendar over a remote additions/removals feed, refreshed per the configured TTL."""

        resolved = _resolve_config(config)
        source = RemoteHolidaySource(
            additions_url,
            removals_url,
            session=session,
            timeout_seconds=timeout_seconds,
        )
        fetch_cache: FetchCache[HolidaySet] = FetchCache(
            source.fetch,
            ttl_seconds=resolved.ttl_seconds,
            clock=clock,
            metric_sink=metric_sink,
        )
        return cls(
            source,
            resolved,
            fetch_cache=fetch_cache,
            decision_capacity=decision_capacity,
            metric_sink=metric_sink,
        )

    # Predicates

    def is_holiday(self, value: DateInput) -> bool:
        day = to_date(value)
        return day in self._holidays_for(day.year)

    def is_weekend(self, value: DateInput) -> bool:
        return to_date(value).weekday() >= 5

    def is_business_day(self, value: DateInput) -> bool:
        day = to_date(value)
        holidays: HolidaySet | None = None
        generation: int | None = None
        if self._fetch_cache is not None:
            # Stored decisions are only trusted while the set they came from is current.
            holidays, generation = self._fetch_cache.snapshot()
            self._decisions.sync(generation)
        cached = self._decisions.get(day)
        if cached is not None:
            return cached
        if holidays is None:
            holidays = self.source.holidays_for(day.year)
        weekday_ok = self.config.business_weekends or day.weekday() < 5
        decision = weekday_ok and day not in holidays
        return self._decisions.put(day, decision, generation)

    # Arithmetic

    def nearest_business_day(self, value: DateInput, direction: Direction = "forward") -> date:
        return self._scan(to_date(value), _sign(direction))

    def following_business_day(self, value: DateInput) -> date:
        return self._step(to_date(value), 1)

    def preceding_business_day(self, value: DateInput) -> date:
        return self._step(to_date(value), -1)

    @overload
    def add_business_days(
        self, value: DateInput, n: int = ..., direction: Direction = ...
    ) -> date: ...

    @overload
    def add_business_days(
        self, value: Iterable[DateInput], n: int = ..., direction: Direction = ...
    ) -> List[date]: ...

    def add_business_days(
        self,
        value: DateInput | Iterable[DateInput],
        n: int = 1,
        direction: Direction = "forward",
    ) -> date | List[date]:
        """Snap to a business day in ``direction``, then step ``n`` business days.

        Any other iterable of dates (list, tuple, generator) is shifted
        element-wise and returned as a list in iteration order.
        """

        _sign(direction)
        if isinstance(value, (str, date)):
            return self._add(to_date(value), n, direction)
        if not isinstance(value, Iterable):
            raise TypeError(
                "Expected a date, datetime, ISO string or an iterable of them, "
                f"got {type(value).__name__}"
            )
        return [self._add(to_date(item), n, direction) for item in value]

    def add_business_day(self, value: DateInput) -> date:
        return self.add_business_days(to_date(value), 1)

    def subtract_business_day(self, value: DateInput) -> date:
        return self.add_business_days(to_date(value), -1)

    def cache_stats(self) -> MutableMapping[str, Any]:
        stats: MutableMapping[str, Any] = {"decisions": self._decisions.stats()}
        if self._fetch_cache is not None:
            stats["fetch"] = self._fetch_cache.stats()
        return stats

    def _add(self, day: date, n: int, direction: Direction) -> date:
        base = self.nearest_business_day(day, direction)
        sign = 1 if n > 0 else -1
        for _ in range(abs(n)):
            base = self._step(base, sign)
        return base

    def _step(self, day: date, sign: int) -> date:
        return self._scan(day + sign * _ONE_DAY, sign)

    def _scan(self, start: date, sign: int) -> date:
        day = start
        for _ in range(_MAX_SCAN_DAYS):
            if self.is_business_day(day):
                return day
            day += sign * _ONE_DAY
        raise CalendarError(f"No business day within {_MAX_SCAN_DAYS} days of {start.isoformat()}")

    def _holidays_for(self, year: int) -> HolidaySet:
        if self._fetch_cache is not None:
            return self._fetch_cache.get()
        return self.source.holidays_for(year)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source={self.source.name!r}, config={self.config!r})"


__all__ = ["BusinessCalendar", "DateInput", "Direction", "to_date"]
