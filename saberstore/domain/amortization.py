"""Installment financing engine - flat-rate amortization and monthly schedules"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Union

from saberstore.domain.exceptions import InvalidAmountError, InvalidPlanError, ValidationError
from saberstore.domain.models import AmortizationResult, FinancingPlan, ScheduleEntry
from saberstore.utils.date_utils import add_months

CENT = Decimal("0.01")
HUNDRED = Decimal("100")

Number = Union[Decimal, int, str, float]


def to_decimal(value: Number) -> Decimal:
    """Coerce API/ORM numbers to Decimal without binary float noise"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(amount: Decimal) -> Decimal:
    """Round to cents, half-up (0.005 -> 0.01)"""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _check_plan(plan: Optional[FinancingPlan]) -> None:
    if plan is None:
        raise InvalidPlanError()
    if not plan.is_active:
        raise InvalidPlanError(plan.id, "is inactive")
    if plan.duration_months < 1:
        raise InvalidPlanError(plan.id, "must last at least one month")
    if to_decimal(plan.interest_rate_percent) < 0:
        raise InvalidPlanError(plan.id, "has a negative interest rate")
    if not 0 <= to_decimal(plan.min_down_payment_percent) <= HUNDRED:
        raise InvalidPlanError(plan.id, "has a minimum down payment outside 0-100%")


def calculate(
    purchase_amount: Number,
    plan: Optional[FinancingPlan],
    down_payment_percent: Optional[Number] = None,
) -> AmortizationResult:
    """
    Split a purchase into down payment and flat-rate monthly installments.

    Interest is charged once on the financed principal for the whole term
    (retail convention), not compounded per period.

    Args:
        purchase_amount: Cash total of the order, must be > 0
        plan: Active financing plan
        down_payment_percent: Optional customer choice; must be at least the
            plan minimum and below 100. Defaults to the plan minimum.

    Raises:
        InvalidAmountError: purchase_amount <= 0
        InvalidPlanError: plan missing, inactive, or with invalid terms
        ValidationError: down_payment_percent out of range

    Example:
        10000 EGP, 12 months, 12% flat, 20% down:
        down 2000, principal 8000, interest 960, monthly 746.67, total 10960
    """
    amount = to_decimal(purchase_amount)
    if amount <= 0:
        raise InvalidAmountError(amount)

    _check_plan(plan)

    min_percent = to_decimal(plan.min_down_payment_percent)
    if down_payment_percent is None:
        percent = min_percent
    else:
        percent = to_decimal(down_payment_percent)
        if percent < min_percent or percent >= HUNDRED:
            raise ValidationError(
                f"Down payment must be between {min_percent}% and 100% for plan {plan.name}"
            )

    rate = to_decimal(plan.interest_rate_percent)

    down_payment = amount * percent / HUNDRED
    financed_principal = amount - down_payment
    total_interest = financed_principal * rate / HUNDRED
    total_financed_with_interest = financed_principal + total_interest

    monthly_payment = round_money(total_financed_with_interest / plan.duration_months)
    # Reported as-is, not reconciled with monthly_payment * duration
    total_amount = round_money(down_payment + total_financed_with_interest)

    return AmortizationResult(
        plan_id=plan.id,
        plan_name=plan.name,
        purchase_amount=amount,
        duration_months=plan.duration_months,
        interest_rate_percent=rate,
        down_payment_percent=percent,
        down_payment=down_payment,
        financed_principal=financed_principal,
        total_interest=total_interest,
        total_financed_with_interest=total_financed_with_interest,
        monthly_payment=monthly_payment,
        total_amount=total_amount,
    )


def generate_schedule(start_date: date, duration: int, monthly_payment: Number) -> List[ScheduleEntry]:
    """
    Build the monthly payment schedule for a contract.

    Installment i falls due i calendar months after start_date, each computed
    from start_date itself so a clamped month-end never shifts later dates
    (Jan 31 -> Feb 28 -> Mar 31). Every entry carries the same amount.
    """
    if duration < 1:
        raise ValidationError(f"Schedule duration must be at least one month, got {duration}")

    amount = to_decimal(monthly_payment)
    return [
        ScheduleEntry(installment_number=i, due_date=add_months(start_date, i), amount=amount)
        for i in range(1, duration + 1)
    ]
