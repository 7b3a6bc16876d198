from datetime import UTC, date, datetime

from calorie_planner.services.dates import (
    date_key,
    parse_date_key,
    today,
    week_dates,
    week_start,
)


def test_date_key_uses_reference_timezone() -> None:
    # 02:00 UTC on the 16th is still the evening of the 15th in Buenos Aires.
    moment = datetime(2024, 5, 16, 2, 0, tzinfo=UTC)

    assert date_key(moment) == "2024-05-15"
    assert date_key(moment, "UTC") == "2024-05-16"


def test_date_key_treats_naive_datetimes_as_utc() -> None:
    assert date_key(datetime(2024, 5, 16, 2, 0)) == "2024-05-15"  # noqa: DTZ001


def test_today_is_derived_from_now() -> None:
    assert today(now=datetime(2024, 1, 1, 1, 0, tzinfo=UTC)) == date(2023, 12, 31)


def test_week_dates_run_monday_to_sunday() -> None:
    assert week_dates(date(2024, 5, 19)) == [
        "2024-05-13",
        "2024-05-14",
        "2024-05-15",
        "2024-05-16",
        "2024-05-17",
        "2024-05-18",
        "2024-05-19",
    ]
    assert week_start(date(2024, 5, 13)) == date(2024, 5, 13)


def test_week_dates_cross_month_boundaries() -> None:
    dates = week_dates(date(2024, 3, 1))

    assert dates[0] == "2024-02-26"
    assert dates[-1] == "2024-03-03"


def test_parse_date_key_round_trips_a_key() -> None:
    assert parse_date_key("2024-02-29") == date(2024, 2, 29)
