"""GET /v1/installments/plans, POST /v1/installments/calculate - financing previews"""

from fastapi import APIRouter, Depends, HTTPException

from saberstore.api.v1.schemas import (
    CalculateRequest,
    CalculationResponse,
    PlanListResponse,
    PlanSchema,
    ScheduleEntrySchema,
)
from saberstore.api.dependencies import get_installment_service
from saberstore.domain.amortization import round_money
from saberstore.domain.exceptions import InvalidPlanError, ValidationError
from saberstore.infrastructure.database.models import InstallmentPlan
from saberstore.services.installments import InstallmentService

router = APIRouter()


def plan_to_schema(plan: InstallmentPlan) -> PlanSchema:
    return PlanSchema(
        plan_id=str(plan.id),
        name=plan.name,
        duration_months=plan.duration_months,
        interest_rate_percent=plan.interest_rate_percent,
        min_down_payment_percent=plan.min_down_payment_percent,
        is_active=plan.is_active,
    )


@router.get("/installments/plans", response_model=PlanListResponse)
def list_plans(service: InstallmentService = Depends(get_installment_service)):
    """Active financing plans, shortest first"""
    return PlanListResponse(plans=[plan_to_schema(p) for p in service.list_active_plans()])


@router.post("/installments/calculate", response_model=CalculationResponse)
def calculate_installments(
    request_body: CalculateRequest,
    service: InstallmentService = Depends(get_installment_service),
):
    """
    Preview down payment, monthly payment, and schedule for a cash price.

    Same calculation the order workflow uses, so the quote matches the contract.
    """
    try:
        result, schedule = service.preview(
            request_body.amount, request_body.plan_id, request_body.down_payment_percent
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InvalidPlanError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return CalculationResponse(
        plan_id=str(result.plan_id),
        plan_name=result.plan_name,
        purchase_amount=round_money(result.purchase_amount),
        duration_months=result.duration_months,
        interest_rate_percent=result.interest_rate_percent,
        down_payment_percent=result.down_payment_percent,
        down_payment=round_money(result.down_payment),
        financed_principal=round_money(result.financed_principal),
        total_interest=round_money(result.total_interest),
        total_financed_with_interest=round_money(result.total_financed_with_interest),
        monthly_payment=result.monthly_payment,
        total_amount=result.total_amount,
        schedule=[
            ScheduleEntrySchema(
                installment_number=entry.installment_number,
                due_date=entry.due_date,
                amount=entry.amount,
                status=entry.status.value,
            )
            for entry in schedule
        ],
    )
