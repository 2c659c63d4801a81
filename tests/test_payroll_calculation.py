"""
Pay arithmetic without a database.
"""
from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

from cafeshift.services.payroll_service import (
    calculate_pay,
    compute_regular_hours_cap,
    compute_shift_hours,
    hours_between,
)


def test_two_week_period_without_overtime():
    start = datetime(2026, 1, 1)
    cap = compute_regular_hours_cap(start, start + timedelta(days=14))
    assert cap == Decimal(80)

    pay = calculate_pay(Decimal(24), Decimal(15), cap)

    assert pay.regular_hours == Decimal(24)
    assert pay.overtime_hours == Decimal(0)
    assert pay.gross_pay == Decimal(360)
    assert pay.deductions == Decimal(54)
    assert pay.net_pay == Decimal(306)


def test_one_week_period_three_eight_hour_shifts():
    start = datetime(2026, 1, 5)
    cap = compute_regular_hours_cap(start, start + timedelta(days=7))
    assert cap == Decimal(40)

    worked = sum(
        (compute_shift_hours(SimpleNamespace(
            start_time=start + timedelta(days=day, hours=8),
            end_time=start + timedelta(days=day, hours=16),
            actual_start_time=None,
            actual_end_time=None,
        )) for day in range(3)),
        Decimal(0),
    )
    pay = calculate_pay(worked, Decimal("15.00"), cap)

    assert pay.total_hours == Decimal(24)
    assert pay.regular_hours == Decimal(24)
    assert pay.overtime_hours == Decimal(0)
    assert pay.gross_pay == Decimal("360.00")
    assert pay.deductions == Decimal("54.00")
    assert pay.net_pay == Decimal("306.00")


def test_one_week_period_with_overtime():
    start = datetime(2026, 1, 5)
    cap = compute_regular_hours_cap(start, start + timedelta(days=7))

    pay = calculate_pay(Decimal(45), Decimal(15), cap)

    assert pay.regular_hours == Decimal(40)
    assert pay.overtime_hours == Decimal(5)
    assert pay.gross_pay == Decimal("712.5")
    assert pay.deductions == Decimal("106.875")
    assert pay.net_pay == Decimal("605.625")


def test_pay_invariants_hold_across_inputs():
    cap = Decimal(40)
    for hours in ("0", "12.25", "39.99", "40", "40.01", "61.5"):
        pay = calculate_pay(Decimal(hours), Decimal("17.75"), cap)
        assert pay.regular_hours + pay.overtime_hours == pay.total_hours
        assert pay.regular_hours <= cap
        assert pay.overtime_hours >= 0
        assert pay.deductions == pay.gross_pay * Decimal("0.15")
        assert pay.net_pay == pay.gross_pay - pay.deductions


def test_fractional_week_cap():
    start = datetime(2026, 3, 1)
    assert compute_regular_hours_cap(start, start + timedelta(days=3, hours=12)) == Decimal(20)


def test_shift_hours_prefer_clocked_times():
    start = datetime(2026, 2, 2, 8)
    scheduled = SimpleNamespace(
        start_time=start,
        end_time=start + timedelta(hours=8),
        actual_start_time=None,
        actual_end_time=None,
    )
    assert compute_shift_hours(scheduled) == Decimal(8)

    clocked = SimpleNamespace(
        start_time=start,
        end_time=start + timedelta(hours=8),
        actual_start_time=start + timedelta(minutes=15),
        actual_end_time=start + timedelta(hours=8, minutes=45),
    )
    assert compute_shift_hours(clocked) == Decimal("8.5")


def test_hours_between_handles_partial_hours():
    start = datetime(2026, 1, 1, 9)
    assert hours_between(start, start + timedelta(minutes=90)) == Decimal("1.5")
