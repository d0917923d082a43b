from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from src.attendance_ledger.attendance_ledger.common.datetime_utils import (
    day_window,
    hours_between,
    months_before,
    to_local_date,
)
from src.attendance_ledger.attendance_ledger.core.exceptions import RecordFieldError

IST = ZoneInfo("Asia/Kolkata")


def test_months_before_clamps_to_month_end():
    assert months_before(date(2025, 8, 31), 6) == date(2025, 2, 28)
    assert months_before(date(2024, 3, 31), 1) == date(2024, 2, 29)
    assert months_before(date(2025, 3, 15), 6) == date(2024, 9, 15)


def test_day_window_is_half_open_over_whole_days():
    lower, upper = day_window(date(2025, 1, 1), date(2025, 1, 31), IST)

    assert lower == datetime(2025, 1, 1, tzinfo=IST)
    assert upper == datetime(2025, 2, 1, tzinfo=IST)


def test_to_local_date_shifts_utc_midnight_into_ledger_zone():
    # Midnight in Kolkata is 18:30 UTC the previous day.
    stored = datetime(2025, 1, 25, 18, 30, tzinfo=timezone.utc)

    assert to_local_date(stored, IST) == date(2025, 1, 26)


def test_to_local_date_accepts_naive_and_iso_strings():
    assert to_local_date(datetime(2025, 1, 26, 0, 0), IST) == date(2025, 1, 26)
    assert to_local_date("2025-01-26", IST) == date(2025, 1, 26)
    assert to_local_date("2025-01-25T18:30:00Z", IST) == date(2025, 1, 26)


@pytest.mark.parametrize("value", [None, "not-a-date", 12345])
def test_to_local_date_rejects_malformed_values(value):
    with pytest.raises(RecordFieldError):
        to_local_date(value, IST)


def test_hours_between():
    assert hours_between("10:00", "18:00") == "8:00"
    assert hours_between("09:45", "17:30") == "7:45"
    assert hours_between("11:20", None) is None


def test_hours_between_rejects_clock_out_before_clock_in():
    with pytest.raises(ValueError):
        hours_between("22:00", "06:00")
