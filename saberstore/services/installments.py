"""Financing plan catalog and payment previews"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from saberstore.domain.amortization import calculate, generate_schedule, to_decimal
from saberstore.domain.exceptions import InvalidPlanError, NotFoundError, ValidationError
from saberstore.domain.models import AmortizationResult, ScheduleEntry
from saberstore.infrastructure.database.models import InstallmentPlan
from saberstore.infrastructure.database.repositories import PlanRepository


class InstallmentService:
    """Read access to active plans plus admin plan maintenance"""

    def __init__(self, db: Session, clock: Callable[[], date] = date.today):
        self.db = db
        self.plans = PlanRepository(db)
        self.clock = clock

    def list_active_plans(self) -> List[InstallmentPlan]:
        return self.plans.get_active_plans()

    def get_active_plan(self, plan_id: uuid.UUID) -> InstallmentPlan:
        """Resolve a plan a customer may still sign up for"""
        plan = self.plans.get_plan_by_id(plan_id)
        if plan is None:
            raise InvalidPlanError(plan_id)
        if not plan.is_active:
            raise InvalidPlanError(plan_id, "is inactive")
        return plan

    def preview(
        self,
        amount: Decimal,
        plan_id: uuid.UUID,
        down_payment_percent: Optional[Decimal] = None,
    ) -> Tuple[AmortizationResult, List[ScheduleEntry]]:
        """
        Quote monthly payments before checkout.

        Uses the same calculate() call as order creation, so the storefront
        preview always matches the contract that would be created today.
        """
        plan = self.get_active_plan(plan_id)
        result = calculate(amount, plan.to_domain(), down_payment_percent)
        schedule = generate_schedule(self.clock(), result.duration_months, result.monthly_payment)
        return result, schedule

    def create_plan(
        self,
        name: str,
        duration_months: int,
        interest_rate_percent: Decimal,
        min_down_payment_percent: Decimal,
    ) -> InstallmentPlan:
        if not name or not name.strip():
            raise ValidationError("Plan name is required")
        if duration_months < 1:
            raise ValidationError("Plan duration must be at least one month")
        rate = to_decimal(interest_rate_percent)
        if rate < 0:
            raise ValidationError("Interest rate cannot be negative")
        down = to_decimal(min_down_payment_percent)
        if not 0 <= down <= 100:
            raise ValidationError("Minimum down payment must be between 0% and 100%")

        try:
            plan = self.plans.create_plan(name.strip(), duration_months, rate, down)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return plan

    def deactivate_plan(self, plan_id: uuid.UUID) -> InstallmentPlan:
        """Withdraw a plan from sale; contracts keep referencing it"""
        plan = self.plans.get_plan_by_id(plan_id)
        if plan is None:
            raise NotFoundError(f"Installment plan {plan_id} not found")

        plan.is_active = False
        self.db.commit()
        return plan
