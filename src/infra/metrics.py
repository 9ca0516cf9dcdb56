"""Prometheus counters for holiday fetches and decision cache flushes."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from prometheus_client import REGISTRY, Counter, push_to_gateway

_LOGGER = logging.getLogger("infra.metrics")

_HOLIDAY_FETCHES = Counter(
    "business_calendar_holiday_fetches_total",
    "Remote holiday set fetches",
    ["outcome"],
)
_DECISION_FLUSHES = Counter(
    "business_calendar_decision_cache_flushes_total",
    "Times the business-day decision cache was cleared at capacity",
)


class PrometheusMetricSink:
    """Callable sink for calendar caches that forwards to Prometheus.

    Event names other than ``holiday_fetch`` and ``decision_cache_flush`` are ignored.
    """

    def __call__(self, name: str, value: float, tags: Mapping[str, Any] | None = None) -> None:
        tags = tags or {}
        if name == "holiday_fetch":
            _HOLIDAY_FETCHES.labels(outcome=str(tags.get("outcome", "unknown"))).inc(value)
        elif name == "decision_cache_flush":
            _DECISION_FLUSHES.inc(value)


def push_metrics(gateway: str, job: str = "business_calendar") -> None:
    """Push the process registry to a Prometheus Pushgateway.

    Short-lived commands exit before any scrape could happen, so they push once
    on the way out. An unreachable gateway is logged and does not fail the command.
    """

    try:
        push_to_gateway(gateway, job=job, registry=REGISTRY)
    except OSError as exc:
        _LOGGER.warning("metrics push to %s failed: %s", gateway, exc)


__all__ = ["PrometheusMetricSink", "push_metrics"]
