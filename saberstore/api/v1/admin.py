"""Admin endpoints - financing plan maintenance, KYC review, and storefront analytics"""

import uuid
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from saberstore.api.v1.schemas import (
    AnalyticsResponse,
    ApproveKycRequest,
    CreatePlanRequest,
    CreditLimitResponse,
    KycProfileSchema,
    PendingKycResponse,
    PlanSchema,
    RejectKycRequest,
)
from saberstore.api.v1.installments import plan_to_schema
from saberstore.api.v1.kyc import profile_to_schema
from saberstore.api.dependencies import (
    get_analytics_service,
    get_credit_service,
    get_installment_service,
    get_request_id,
    require_admin,
)
from saberstore.domain.exceptions import NotFoundError, ValidationError
from saberstore.infrastructure.database.models import CreditLimit
from saberstore.services.analytics import AnalyticsService
from saberstore.services.credit import CreditService
from saberstore.services.installments import InstallmentService

# Gateway-authenticated callers with the admin role only
router = APIRouter(dependencies=[Depends(require_admin)])


def credit_to_response(credit: CreditLimit) -> CreditLimitResponse:
    return CreditLimitResponse(
        user_id=credit.user_id,
        total_limit=credit.total_limit,
        remaining_limit=credit.remaining_limit,
        current_balance=credit.current_balance,
        status=credit.status,
    )


@router.post("/admin/plans", response_model=PlanSchema, status_code=201)
def create_plan(
    request_body: CreatePlanRequest,
    admin_id: str = Depends(require_admin),
    service: InstallmentService = Depends(get_installment_service),
):
    """Add a financing plan to the catalog"""
    try:
        plan = service.create_plan(
            name=request_body.name,
            duration_months=request_body.duration_months,
            interest_rate_percent=request_body.interest_rate_percent,
            min_down_payment_percent=request_body.min_down_payment_percent,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logging.info("Installment plan created", extra={"plan_id": str(plan.id), "admin_id": admin_id})
    return plan_to_schema(plan)


@router.post("/admin/plans/{plan_id}/deactivate", response_model=PlanSchema)
def deactivate_plan(
    plan_id: str,
    admin_id: str = Depends(require_admin),
    service: InstallmentService = Depends(get_installment_service),
):
    """Withdraw a plan from sale. Plans are never deleted: contracts reference them."""
    try:
        plan_uuid = uuid.UUID(plan_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid plan ID format")

    try:
        plan = service.deactivate_plan(plan_uuid)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    logging.info("Installment plan deactivated", extra={"plan_id": plan_id, "admin_id": admin_id})
    return plan_to_schema(plan)


@router.post("/admin/kyc/{user_id}/approve", response_model=CreditLimitResponse)
def approve_kyc(
    user_id: str,
    request_body: ApproveKycRequest,
    request: Request,
    admin_id: str = Depends(require_admin),
    service: CreditService = Depends(get_credit_service),
):
    """Approve a customer's KYC and set their installment credit limit"""
    try:
        credit = service.approve_kyc(
            user_id=user_id,
            total_limit=request_body.total_limit,
            approved_by=admin_id,
            phone_number=request_body.phone_number,
            full_name=request_body.full_name,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logging.info(
        "KYC approved",
        extra={
            "request_id": get_request_id(request),
            "user_id": user_id,
            "admin_id": admin_id,
            "total_limit": str(credit.total_limit),
        },
    )
    return credit_to_response(credit)


@router.get("/admin/kyc/pending", response_model=PendingKycResponse)
def list_pending_kyc(
    limit: int = 20,
    offset: int = 0,
    service: CreditService = Depends(get_credit_service),
):
    """KYC applications awaiting review, oldest submission first"""
    try:
        profiles = service.list_pending_kyc(limit=limit, offset=offset)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return PendingKycResponse(profiles=[profile_to_schema(p) for p in profiles])


@router.post("/admin/kyc/{user_id}/reject", response_model=KycProfileSchema)
def reject_kyc(
    user_id: str,
    request_body: RejectKycRequest,
    request: Request,
    admin_id: str = Depends(require_admin),
    service: CreditService = Depends(get_credit_service),
):
    """Refuse a customer's KYC; any credit line they hold is suspended"""
    try:
        profile = service.reject_kyc(user_id, rejected_by=admin_id, reason=request_body.reason)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    logging.info(
        "KYC rejected",
        extra={"request_id": get_request_id(request), "user_id": user_id, "admin_id": admin_id},
    )
    return profile_to_schema(profile)


@router.get("/admin/analytics", response_model=AnalyticsResponse)
def get_analytics(service: AnalyticsService = Depends(get_analytics_service)):
    return AnalyticsResponse(**service.get_summary())
