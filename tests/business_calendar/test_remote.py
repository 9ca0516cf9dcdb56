from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest
import requests
import responses

from business_calendar import BusinessCalendar, RemoteHolidaySource, SourceUnavailable

D = date.fromisoformat
ADDITIONS_URL = "http://fakeendpoint.test/additions"
REMOVALS_URL = "http://fakeendpoint.test/removals"
ONE_DAY = 86400


def test_endpoint_holidays_are_not_business_days(remote_calendar) -> None:
    calendar = remote_calendar()
    assert calendar.is_business_day(D("2014-07-04")) is False
    assert calendar.is_business_day(D("2014-07-05")) is False
    assert calendar.is_holiday(datetime(2014, 7, 4, 12, 0)) is True


def test_removals_are_subtracted_and_absent_removals_ignored(remote_calendar) -> None:
    calendar = remote_calendar()
    assert calendar.is_holiday(D("2014-12-24")) is False
    assert calendar.is_business_day(D("2014-12-24")) is True


def test_fetches_once_and_reuses_the_cached_result(remote_calendar, endpoint_calls) -> None:
    calendar = remote_calendar()
    calendar.is_business_day(D("2014-07-03"))
    calendar.is_business_day(D("2014-07-03"))
    calendar.is_business_day(D("2014-07-04"))
    calendar.is_holiday(D("2014-07-06"))
    calendar.is_holiday(D("2014-07-06"))
    calendar.is_holiday(D("2014-12-24"))

    assert endpoint_calls() == (1, 1)


def test_default_ttl_expires_after_one_day(remote_calendar, endpoint_calls, clock) -> None:
    calendar = remote_calendar()

    calendar.is_business_day(D("2014-01-01"))
    assert endpoint_calls() == (1, 1)

    calendar.is_business_day(D("2014-07-04"))
    calendar.is_business_day(D("2014-11-28"))
    assert endpoint_calls() == (1, 1)

    clock.advance(ONE_DAY + 1)
    calendar.is_business_day(D("2014-01-01"))
    assert endpoint_calls() == (2, 2)

    calendar.is_business_day(D("2014-07-04"))
    calendar.is_business_day(D("2014-11-28"))
    assert endpoint_calls() == (2, 2)


def test_disabled_ttl_never_refetches(remote_calendar, endpoint_calls, clock) -> None:
    calendar = remote_calendar({"ttl": False})

    calendar.is_holiday(D("2014-01-01"))
    assert endpoint_calls() == (1, 1)

    clock.advance(301)
    calendar.is_holiday(D("2014-01-01"))
    calendar.is_holiday(D("2014-07-04"))
    assert endpoint_calls() == (1, 1)

    clock.advance(ONE_DAY * 365)
    calendar.is_holiday(D("2014-11-28"))
    calendar.is_business_day(D("2014-11-28"))
    assert endpoint_calls() == (1, 1)


def test_zero_ttl_refetches_on_every_lookup(remote_calendar, endpoint_calls, clock) -> None:
    calendar = remote_calendar({"ttl": 0})

    calendar.is_holiday(D("2014-01-01"))
    assert endpoint_calls() == (1, 1)

    clock.advance(301)
    calendar.is_holiday(D("2014-01-01"))
    calendar.is_holiday(D("2014-07-04"))
    calendar.is_holiday(D("2014-07-04"))
    calendar.is_holiday(D("2014-11-28"))
    assert endpoint_calls() == (5, 5)

    calendar.is_holiday(D("2014-01-01"))
    calendar.is_holiday(D("2014-01-01"))
    calendar.is_holiday(D("2014-07-04"))
    calendar.is_holiday(D("2014-11-28"))
    assert endpoint_calls() == (9, 9)

    calendar.is_business_day(D("2014-01-02"))
    calendar.is_business_day(D("2014-01-02"))
    assert endpoint_calls() == (11, 11)


def test_custom_ttl(remote_calendar, endpoint_calls, clock) -> None:
    calendar = remote_calendar({"ttl": 300})
    dates = [D("2014-01-01"), D("2014-07-04"), D("2014-11-28")]

    for day in dates:
        calendar.is_business_day(day)
    assert endpoint_calls() == (1, 1)

    clock.advance(120)
    for day in dates:
        calendar.is_business_day(day)
    assert endpoint_calls() == (1, 1)

    clock.advance(181)
    for day in dates:
        calendar.is_business_day(day)
    assert endpoint_calls() == (2, 2)

    for day in dates:
        calendar.is_business_day(day)
    assert endpoint_calls() == (2, 2)


def test_stored_decisions_follow_a_refreshed_feed(
    remote_calendar, holiday_endpoints, endpoint_calls, clock
) -> None:
    calendar = remote_calendar({"ttl": 300})
    assert calendar.is_business_day(D("2014-07-07")) is True

    holiday_endpoints.replace(
        responses.GET, ADDITIONS_URL, json={"holidays": ["2014-07-04", "2014-07-07"]}, status=200
    )
    clock.advance(ONE_DAY * 10)

    assert calendar.is_business_day(D("2014-07-07")) is False
    assert calendar.is_holiday(D("2014-07-07")) is True
    assert endpoint_calls() == (2, 2)


def test_business_day_agrees_with_holiday_after_each_refresh(
    remote_calendar, holiday_endpoints, clock
) -> None:
    calendar = remote_calendar({"ttl": 60})
    day = D("2014-07-08")
    for feed in (["2014-07-04"], ["2014-07-08"], []):
        holiday_endpoints.replace(responses.GET, ADDITIONS_URL, json={"holidays": feed}, status=200)
        clock.advance(61)
        assert calendar.is_business_day(day) is (not calendar.is_holiday(day))


def test_decision_cache_flush_keeps_the_fetched_holidays(remote_calendar, endpoint_calls) -> None:
    calendar = remote_calendar()
    day = D("2014-01-01")
    for _ in range(1000):
        calendar.is_business_day(day)
        day += timedelta(days=1)

    stats = calendar.cache_stats()
    assert stats["decisions"]["size"] == 1000
    assert endpoint_calls() == (1, 1)

    for _ in range(4):
        calendar.is_business_day(day)
        day += timedelta(days=1)

    stats = calendar.cache_stats()
    assert stats["decisions"]["size"] == 4
    assert stats["decisions"]["flushes"] == 1
    assert endpoint_calls() == (1, 1)


def test_batch_shift_shares_a_single_fetch(remote_calendar, endpoint_calls) -> None:
    calendar = remote_calendar()
    result = calendar.add_business_days([D("2014-07-03"), D("2014-07-02"), D("2014-03-08")], 1)
    assert result == [D("2014-07-07"), D("2014-07-03"), D("2014-03-11")]
    assert endpoint_calls() == (1, 1)


def test_http_error_raises_source_unavailable(remote_calendar, holiday_endpoints) -> None:
    holiday_endpoints.replace(responses.GET, ADDITIONS_URL, status=500)
    calendar = remote_calendar()

    with pytest.raises(SourceUnavailable) as excinfo:
        calendar.is_business_day(D("2014-07-04"))
    assert isinstance(excinfo.value.__cause__, requests.HTTPError)

    with pytest.raises(SourceUnavailable):
        calendar.add_business_days(D("2014-07-04"), 2)


def test_failed_refresh_is_not_served_stale(remote_calendar, holiday_endpoints, clock) -> None:
    calendar = remote_calendar({"ttl": 60})
    assert calendar.is_holiday(D("2014-07-04")) is True

    holiday_endpoints.replace(responses.GET, ADDITIONS_URL, status=503)
    clock.advance(61)
    with pytest.raises(SourceUnavailable):
        calendar.is_holiday(D("2014-07-04"))

    holiday_endpoints.replace(
        responses.GET, ADDITIONS_URL, json={"holidays": ["2014-07-04"]}, status=200
    )
    assert calendar.is_holiday(D("2014-07-04")) is True
    assert calendar.is_holiday(D("2014-07-05")) is False


@responses.activate
def test_remote_source_validates_payload() -> None:
    responses.add(responses.GET, ADDITIONS_URL, json={"holidays": "2014-07-04"}, status=200)
    responses.add(responses.GET, REMOVALS_URL, json={"holidays": []}, status=200)
    source = RemoteHolidaySource(ADDITIONS_URL, REMOVALS_URL)

    with pytest.raises(SourceUnavailable):
        source.fetch()


@responses.activate
def test_remote_source_requires_a_holidays_entry() -> None:
    responses.add(responses.GET, ADDITIONS_URL, json={"dates": ["2014-07-04"]}, status=200)
    responses.add(responses.GET, REMOVALS_URL, json={"holidays": []}, status=200)
    source = RemoteHolidaySource(ADDITIONS_URL, REMOVALS_URL)

    with pytest.raises(SourceUnavailable, match="no holidays entry"):
        source.fetch()

    responses.replace(responses.GET, ADDITIONS_URL, json={"holidays": None}, status=200)
    with pytest.raises(SourceUnavailable):
        source.fetch()


@responses.activate
def test_remote_source_rejects_bad_dates_and_bodies() -> None:
    responses.add(responses.GET, ADDITIONS_URL, json={"holidays": ["July 4th"]}, status=200)
    responses.add(responses.GET, REMOVALS_URL, body="<html>oops</html>", status=200)
    source = RemoteHolidaySource(ADDITIONS_URL, REMOVALS_URL)

    with pytest.raises(SourceUnavailable):
        source.fetch()

    responses.replace(responses.GET, ADDITIONS_URL, json={"holidays": ["2014-07-04"]}, status=200)
    with pytest.raises(SourceUnavailable):
        source.fetch()


@responses.activate
def test_remote_source_ignores_year() -> None:
    responses.add(
        responses.GET,
        ADDITIONS_URL,
        json={"holidays": ["2014-07-04", "2015-07-03"]},
        status=200,
    )
    responses.add(responses.GET, REMOVALS_URL, json={"holidays": ["2015-07-03"]}, status=200)
    source = RemoteHolidaySource(ADDITIONS_URL, REMOVALS_URL)

    assert source.holidays_for(1999) == frozenset({D("2014-07-04")})


def test_transport_error_raises_source_unavailable(remote_calendar, holiday_endpoints) -> None:
    holiday_endpoints.replace(
        responses.GET, REMOVALS_URL, body=requests.ConnectionError("connection refused")
    )
    calendar = remote_calendar()

    with pytest.raises(SourceUnavailable):
        calendar.is_holiday(D("2014-07-04"))


def test_remote_calendar_accepts_a_session(holiday_endpoints) -> None:
    with requests.Session() as session:
        calendar = BusinessCalendar.for_endpoints(ADDITIONS_URL, REMOVALS_URL, session=session)
        assert calendar.is_business_day(D("2014-07-07")) is True
