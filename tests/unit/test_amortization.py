"""Unit tests for installment calculation and schedule generation"""

import pytest
from datetime import date
from decimal import Decimal
from saberstore.domain.amortization import calculate, generate_schedule, round_money
from saberstore.domain.exceptions import InvalidAmountError, InvalidPlanError, ValidationError
from saberstore.domain.models import FinancingPlan, ScheduleStatus


def make_plan(duration=12, rate="12", down="20", active=True) -> FinancingPlan:
    return FinancingPlan(
        id=None,
        name=f"{duration} months",
        duration_months=duration,
        interest_rate_percent=Decimal(rate),
        min_down_payment_percent=Decimal(down),
        is_active=active,
    )


def test_calculate_zero_interest_plan():
    """10,000 EGP over 24 months at 0% with 10% down"""
    result = calculate(Decimal("10000"), make_plan(duration=24, rate="0", down="10"))

    assert result.down_payment == Decimal("1000")
    assert result.financed_principal == Decimal("9000")
    assert result.total_interest == 0
    assert result.monthly_payment == Decimal("375.00")
    assert result.total_amount == Decimal("10000.00")


def test_calculate_flat_interest_plan():
    """10,000 EGP over 12 months at 12% flat with 20% down"""
    result = calculate(Decimal("10000"), make_plan())

    assert result.down_payment == Decimal("2000")
    assert result.financed_principal == Decimal("8000")
    assert result.total_interest == Decimal("960")
    assert result.total_financed_with_interest == Decimal("8960")
    assert result.monthly_payment == Decimal("746.67")  # 746.666... rounded half-up
    assert abs(result.total_amount - Decimal("10960")) <= Decimal("0.06")


def test_calculate_interest_is_flat_not_compounded():
    """Doubling the term leaves total interest unchanged"""
    short = calculate(Decimal("6000"), make_plan(duration=6, rate="10", down="0"))
    long = calculate(Decimal("6000"), make_plan(duration=12, rate="10", down="0"))

    assert short.total_interest == long.total_interest == Decimal("600")
    assert long.monthly_payment == Decimal("550.00")


@pytest.mark.parametrize(
    "amount, duration, rate, down",
    [
        ("9999.99", 24, "0", "10"),
        ("1234.56", 7, "15.5", "0"),
        ("15000", 18, "22", "25"),
        ("0.03", 3, "0", "0"),
        ("87650.10", 36, "30", "35"),
    ],
)
def test_calculate_principal_split_and_rounding_drift(amount, duration, rate, down):
    """Down payment + principal is exact; monthly rounding drift stays within duration * 0.005"""
    result = calculate(Decimal(amount), make_plan(duration, rate, down))

    assert result.down_payment + result.financed_principal == Decimal(amount)
    drift = abs(result.monthly_payment * duration - result.total_financed_with_interest)
    assert drift <= Decimal("0.005") * duration
    assert result.total_amount == round_money(result.down_payment + result.total_financed_with_interest)


def test_calculate_zero_interest_monthly_is_principal_over_duration():
    result = calculate(Decimal("1000"), make_plan(duration=3, rate="0", down="0"))

    assert result.total_interest == 0
    assert result.monthly_payment == round_money(result.financed_principal / 3)
    assert result.monthly_payment == Decimal("333.33")


def test_calculate_accepts_higher_down_payment():
    result = calculate(Decimal("10000"), make_plan(), down_payment_percent=Decimal("50"))

    assert result.down_payment_percent == Decimal("50")
    assert result.down_payment == Decimal("5000")
    assert result.financed_principal == Decimal("5000")


@pytest.mark.parametrize("percent", ["10", "100", "120"])
def test_calculate_rejects_down_payment_out_of_range(percent):
    with pytest.raises(ValidationError):
        calculate(Decimal("10000"), make_plan(down="20"), down_payment_percent=Decimal(percent))


@pytest.mark.parametrize("amount", ["0", "-1", "-0.01"])
def test_calculate_rejects_non_positive_amount(amount):
    with pytest.raises(InvalidAmountError):
        calculate(Decimal(amount), make_plan())


def test_calculate_rejects_inactive_plan():
    with pytest.raises(InvalidPlanError):
        calculate(Decimal("10000"), make_plan(active=False))


def test_calculate_rejects_missing_plan():
    with pytest.raises(InvalidPlanError):
        calculate(Decimal("10000"), None)


def test_calculate_rejects_zero_duration_plan():
    with pytest.raises(InvalidPlanError):
        calculate(Decimal("10000"), make_plan(duration=0))


def test_calculate_converts_float_amount_without_noise():
    result = calculate(0.1 + 0.2, make_plan(duration=1, rate="0", down="0"))

    assert result.purchase_amount == Decimal("0.30000000000000004")
    assert result.monthly_payment == Decimal("0.30")


def test_generate_schedule_length_and_order():
    schedule = generate_schedule(date(2026, 3, 15), 12, Decimal("746.67"))

    assert len(schedule) == 12
    assert [e.installment_number for e in schedule] == list(range(1, 13))
    assert all(a.due_date < b.due_date for a, b in zip(schedule, schedule[1:]))
    assert all(e.amount == Decimal("746.67") for e in schedule)
    assert all(e.status == ScheduleStatus.PENDING for e in schedule)


def test_generate_schedule_first_due_one_month_after_start():
    schedule = generate_schedule(date(2026, 3, 15), 3, Decimal("100"))

    assert [e.due_date for e in schedule] == [date(2026, 4, 15), date(2026, 5, 15), date(2026, 6, 15)]


def test_generate_schedule_clamps_month_end():
    """Jan 31 start: Feb clamps to the 28th, later months return to the 31st/30th"""
    schedule = generate_schedule(date(2026, 1, 31), 4, Decimal("100"))

    assert [e.due_date for e in schedule] == [
        date(2026, 2, 28),
        date(2026, 3, 31),
        date(2026, 4, 30),
        date(2026, 5, 31),
    ]


def test_generate_schedule_leap_year():
    schedule = generate_schedule(date(2028, 1, 30), 1, Decimal("100"))
    assert schedule[0].due_date == date(2028, 2, 29)


def test_generate_schedule_crosses_year_boundary():
    schedule = generate_schedule(date(2026, 11, 30), 3, Decimal("100"))
    assert [e.due_date for e in schedule] == [date(2026, 12, 30), date(2027, 1, 30), date(2027, 2, 28)]


def test_generate_schedule_rejects_zero_duration():
    with pytest.raises(ValidationError):
        generate_schedule(date(2026, 1, 1), 0, Decimal("100"))


def test_generate_schedule_is_restartable():
    first = generate_schedule(date(2026, 5, 31), 6, Decimal("99.99"))
    second = generate_schedule(date(2026, 5, 31), 6, Decimal("99.99"))
    assert first == second
