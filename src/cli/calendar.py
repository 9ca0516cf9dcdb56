"""CLI for business-day lookups and date shifting."""

from __future__ import annotations

import os
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Optional

import typer
from dotenv import load_dotenv

from business_calendar import BusinessCalendar, CalendarConfig, CalendarError, to_date
from infra.logging import configure_logging
from infra.metrics import PrometheusMetricSink, push_metrics

app = typer.Typer(help="Business calendar lookups")


def _configure_environment() -> None:
    load_dotenv()
    run_id = os.environ.get("RUN_ID")
    if not run_id:
        run_id = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        os.environ["RUN_ID"] = run_id
    configure_logging(run_id=run_id, environment=os.environ.get("ENVIRONMENT"))


def _parse_date(value: str) -> date:
    try:
        return to_date(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _parse_direction(value: str) -> str:
    normalized = value.strip().lower()
    if normalized not in {"forward", "backward"}:
        raise typer.BadParameter(f"Unknown direction '{value}'. Valid options: backward, forward")
    return normalized


def _build_calendar(
    country: str | None,
    additions_url: str | None,
    removals_url: str | None,
    business_weekends: bool | None,
) -> BusinessCalendar:
    config = CalendarConfig.from_env()
    if business_weekends is not None:
        config = replace(config, business_weekends=business_weekends)
    sink = PrometheusMetricSink() if os.environ.get("PROMETHEUS_PUSHGATEWAY") else None
    additions_url = additions_url or os.environ.get("HOLIDAY_ADDITIONS_URL")
    removals_url = removals_url or os.environ.get("HOLIDAY_REMOVALS_URL")
    if additions_url or removals_url:
        if not (additions_url and removals_url):
            raise typer.BadParameter("--additions-url and --removals-url must be given together")
        return BusinessCalendar.for_endpoints(
            additions_url, removals_url, config, metric_sink=sink
        )
    code = country or os.environ.get("CALENDAR_COUNTRY", "US")
    return BusinessCalendar.for_jurisdiction(code, config, metric_sink=sink)


def _push_metrics() -> None:
    gateway = os.environ.get("PROMETHEUS_PUSHGATEWAY", "").strip()
    if gateway:
        push_metrics(gateway)


def _calendar_or_exit(
    country: str | None,
    additions_url: str | None,
    removals_url: str | None,
    business_weekends: bool | None,
) -> BusinessCalendar:
    _configure_environment()
    try:
        return _build_calendar(country, additions_url, removals_url, business_weekends)
    except CalendarError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


CountryOption = typer.Option(None, "--country", "-c", help="Jurisdiction code, e.g. US or GB")
AdditionsOption = typer.Option(None, "--additions-url", help="Remote holiday additions endpoint")
RemovalsOption = typer.Option(None, "--removals-url", help="Remote holiday removals endpoint")
WeekendsOption = typer.Option(
    None,
    "--business-weekends/--no-business-weekends",
    help="Treat Saturday and Sunday as business days",
)


@app.command()
def check(
    value: str = typer.Argument(..., help="Date (YYYY-MM-DD)"),
    country: Optional[str] = CountryOption,
    additions_url: Optional[str] = AdditionsOption,
    removals_url: Optional[str] = RemovalsOption,
    business_weekends: Optional[bool] = WeekendsOption,
) -> None:
    """Report whether a date is a holiday and whether it is a business day."""

    day = _parse_date(value)
    calendar = _calendar_or_exit(country, additions_url, removals_url, business_weekends)
    try:
        holiday = calendar.is_holiday(day)
        business_day = calendar.is_business_day(day)
    except CalendarError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    finally:
        _push_metrics()
    typer.echo(
        f"{day.isoformat()} holiday={'yes' if holiday else 'no'} "
        f"business_day={'yes' if business_day else 'no'}"
    )


@app.command()
def nearest(
    value: str = typer.Argument(..., help="Date (YYYY-MM-DD)"),
    direction: str = typer.Option("forward", "--direction", "-d", help="forward or backward"),
    country: Optional[str] = CountryOption,
    additions_url: Optional[str] = AdditionsOption,
    removals_url: Optional[str] = RemovalsOption,
    business_weekends: Optional[bool] = WeekendsOption,
) -> None:
    """Print the nearest business day, scanning in the given direction."""

    day = _parse_date(value)
    resolved_direction = _parse_direction(direction)
    calendar = _calendar_or_exit(country, additions_url, removals_url, business_weekends)
    try:
        result = calendar.nearest_business_day(day, resolved_direction)  # type: ignore[arg-type]
    except CalendarError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    finally:
        _push_metrics()
    typer.echo(result.isoformat())


@app.command()
def shift(
    value: str = typer.Argument(..., help="Date (YYYY-MM-DD)"),
    days: int = typer.Option(1, "--days", "-n", help="Business days to add (negative to subtract)"),
    direction: str = typer.Option(
        "forward", "--direction", "-d", help="Snap direction when the date is not a business day"
    ),
    country: Optional[str] = CountryOption,
    additions_url: Optional[str] = AdditionsOption,
    removals_url: Optional[str] = RemovalsOption,
    business_weekends: Optional[bool] = WeekendsOption,
) -> None:
    """Print the date ``--days`` business days away from the given date."""

    day = _parse_date(value)
    resolved_direction = _parse_direction(direction)
    calendar = _calendar_or_exit(country, additions_url, removals_url, business_weekends)
    try:
        result = calendar.add_business_days(day, days, resolved_direction)  # type: ignore[arg-type]
    except CalendarError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    finally:
        _push_metrics()
    typer.echo(result.isoformat())


if __name__ == "__main__":
    app()
