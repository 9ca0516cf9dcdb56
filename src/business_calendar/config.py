"""Configuration for business calendars."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, MutableMapping

from .sources.base import CalendarError

DEFAULT_TTL_SECONDS = 86400
_DISABLED_WORDS = {"disabled", "off", "false", "none", "no"}


class CalendarConfigError(CalendarError, ValueError):
    """Raised when calendar options are missing or invalid."""


def _get_env(source: Mapping[str, str] | None) -> Mapping[str, str]:
    if source is None:
        return os.environ
    return source


def _parse_bool(key: str, raw: Any, default: bool) -> bool:
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    lowered = str(raw).strip().lower()
    if not lowered:
        return default
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    raise CalendarConfigError(f"{key} must be a boolean, got {raw!r}")


def _parse_ttl(key: str, raw: Any) -> float | None:
    if raw is None or raw is False:
        return None
    if raw is True:
        raise CalendarConfigError(f"{key} must be a number of seconds or disabled")
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        stripped = str(raw).strip()
        if not stripped:
            return DEFAULT_TTL_SECONDS
        if stripped.lower() in _DISABLED_WORDS:
            return None
        try:
            value = float(stripped)
        except ValueError as exc:
            raise CalendarConfigError(f"{key} must be a number of seconds, got {raw!r}") from exc
    if value < 0:
        raise CalendarConfigError(f"{key} must not be negative, got {raw!r}")
    return value


@dataclass(frozen=True)
class CalendarConfig:
    """Per-calendar options, fixed at construction.

    ``ttl_seconds`` bounds the age of a fetched remote holiday set. ``None``
    disables expiry and ``0`` refetches on every holiday lookup.
    """

    business_weekends: bool = False
    ttl_seconds: float | None = DEFAULT_TTL_SECONDS

    def __post_init__(self) -> None:
        if self.ttl_seconds is not None and self.ttl_seconds < 0:
            raise CalendarConfigError(f"ttl_seconds must not be negative, got {self.ttl_seconds}")

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None = None) -> "CalendarConfig":
        """Build from ``business_weekends`` / ``ttl`` options; unknown keys are rejected."""

        options = dict(options or {})
        unknown = set(options) - {"business_weekends", "ttl"}
        if unknown:
            raise CalendarConfigError(f"Unknown calendar options: {', '.join(sorted(unknown))}")
        ttl = _parse_ttl("ttl", options["ttl"]) if "ttl" in options else DEFAULT_TTL_SECONDS
        return cls(
            business_weekends=_parse_bool(
                "business_weekends", options.get("business_weekends"), False
            ),
            ttl_seconds=ttl,
        )

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "CalendarConfig":
        env_map = _get_env(env)
        raw_ttl = env_map.get("HOLIDAY_CACHE_TTL")
        return cls(
            business_weekends=_parse_bool(
                "BUSINESS_WEEKENDS", env_map.get("BUSINESS_WEEKENDS"), False
            ),
            ttl_seconds=(
                DEFAULT_TTL_SECONDS if raw_ttl is None else _parse_ttl("HOLIDAY_CACHE_TTL", raw_ttl)
            ),
        )

    def as_dict(self) -> MutableMapping[str, bool | float | None]:
        return {
            "business_weekends": self.business_weekends,
            "ttl_seconds": self.ttl_seconds,
        }


__all__ = ["CalendarConfig", "CalendarConfigError", "DEFAULT_TTL_SECONDS"]
