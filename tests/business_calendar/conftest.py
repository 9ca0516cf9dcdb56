from __future__ import annotations

from typing import Any, Callable, Iterator

import pytest
import responses

from business_calendar import BusinessCalendar

ADDITIONS_URL = "http://fakeendpoint.test/additions"
REMOVALS_URL = "http://fakeendpoint.test/removals"


class FakeClock:
    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def holiday_endpoints() -> Iterator[responses.RequestsMock]:
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(
            responses.GET,
            ADDITIONS_URL,
            json={"holidays": ["2014-07-04", "2014-07-05"]},
            status=200,
        )
        rsps.add(
            responses.GET,
            REMOVALS_URL,
            json={"holidays": ["2014-12-24", "2014-12-25"]},
            status=200,
        )
        yield rsps


@pytest.fixture
def endpoint_calls(holiday_endpoints: responses.RequestsMock) -> Callable[[], tuple[int, int]]:
    """Return (additions, removals) request counts so far."""

    def counts() -> tuple[int, int]:
        urls = [call.request.url for call in holiday_endpoints.calls]
        return urls.count(ADDITIONS_URL), urls.count(REMOVALS_URL)

    return counts


@pytest.fixture
def remote_calendar(
    holiday_endpoints: responses.RequestsMock, clock: FakeClock
) -> Callable[..., BusinessCalendar]:
    def build(config: Any = None) -> BusinessCalendar:
        return BusinessCalendar.for_endpoints(ADDITIONS_URL, REMOVALS_URL, config, clock=clock)

    return build
