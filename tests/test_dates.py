import datetime

import pytest

from clinicbook import ClinicBookError
from clinicbook.dates import (
    add_months,
    days_between,
    from_gregorian,
    in_range,
    is_leap,
    parse,
    pay_period,
    to_gregorian,
    to_sortable,
)


def test_to_sortable():
    assert to_sortable("1403/5/8") == 14030508
    assert to_sortable("1403/05/08") == 14030508


def test_to_sortable_orders_unpadded_dates():
    assert to_sortable("1403/5/8") < to_sortable("1403/5/10")


@pytest.mark.parametrize("value", ["not-a-date", "1403/5", "1403/ab/01", "1403/²/01", "", None])
def test_to_sortable_malformed_is_zero(value):
    assert to_sortable(value) == 0


def test_in_range():
    assert in_range("1403/05/10", "1403/05/01", "1403/05/31")
    assert not in_range("1403/06/01", "1403/05/01", "1403/05/31")
    assert in_range("1403/05/31", "1403/05/01", "1403/05/31")


def test_in_range_drops_malformed_dates():
    assert not in_range("bad", None, None)


def test_parse_rejects_day_past_month_end():
    with pytest.raises(ClinicBookError):
        parse("1402/12/30")


def test_leap_years():
    assert is_leap(1403)
    assert is_leap(1399)
    assert not is_leap(1402)


def test_add_months_keeps_day():
    assert add_months("1403/05/20") == "1403/06/20"


def test_add_months_clamps_to_month_length():
    assert add_months("1403/06/31") == "1403/07/30"
    assert add_months("1402/11/30") == "1402/12/29"
    assert add_months("1403/06/31", 6) == "1403/12/30"


def test_add_months_wraps_year():
    assert add_months("1403/12/15") == "1404/01/15"


def test_add_months_with_anchor_day():
    assert add_months("1403/07/30", 1, day=31) == "1403/08/30"
    assert add_months("1403/12/30", 1, day=31) == "1404/01/31"


def test_pay_period():
    assert pay_period("1403/05/01") == "مرداد 1403"


def test_days_between():
    assert days_between("1403/05/01", "1403/06/01") == 31
    assert days_between("1403/12/01", "1404/01/01") == 30
    assert days_between("1402/12/01", "1403/01/01") == 29


@pytest.mark.parametrize(
    "gregorian, jalali",
    [
        (datetime.date(2024, 7, 29), "1403/05/08"),
        (datetime.date(2024, 3, 20), "1403/01/01"),
    ],
)
def test_from_gregorian(gregorian, jalali):
    assert from_gregorian(gregorian) == jalali


def test_to_gregorian():
    assert to_gregorian("1403/05/08") == datetime.date(2024, 7, 29)
    assert to_gregorian("1402/12/29") == datetime.date(2024, 3, 19)
    assert from_gregorian(to_gregorian("1403/12/30")) == "1403/12/30"
