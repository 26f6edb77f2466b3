"""POST /v1/kyc/submit, GET /v1/kyc/status - customer KYC applications"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from saberstore.api.v1.schemas import KycProfileSchema, SubmitKycRequest
from saberstore.api.dependencies import get_credit_service, get_current_user_id, get_request_id
from saberstore.domain.exceptions import NotFoundError, ValidationError
from saberstore.infrastructure.database.models import CustomerProfile
from saberstore.services.credit import CreditService

router = APIRouter()


def profile_to_schema(profile: CustomerProfile) -> KycProfileSchema:
    return KycProfileSchema(
        user_id=profile.user_id,
        full_name=profile.full_name,
        phone_number=profile.phone_number,
        national_id=profile.national_id,
        monthly_salary=profile.monthly_salary,
        employer=profile.employer,
        kyc_status=profile.kyc_status,
        kyc_submitted_at=profile.kyc_submitted_at.isoformat() if profile.kyc_submitted_at else None,
        reviewed_by=profile.approved_by,
        rejection_reason=profile.rejection_reason,
    )


@router.post("/kyc/submit", response_model=KycProfileSchema, status_code=201)
def submit_kyc(
    request_body: SubmitKycRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    service: CreditService = Depends(get_credit_service),
):
    """Queue the caller's KYC application for admin review"""
    try:
        profile = service.submit_kyc(
            user_id=user_id,
            phone_number=request_body.phone_number,
            national_id=request_body.national_id,
            monthly_salary=request_body.monthly_salary,
            employer=request_body.employer,
            full_name=request_body.full_name,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logging.info("KYC submitted", extra={"request_id": get_request_id(request), "user_id": user_id})
    return profile_to_schema(profile)


@router.get("/kyc/status", response_model=KycProfileSchema)
def get_kyc_status(
    user_id: str = Depends(get_current_user_id),
    service: CreditService = Depends(get_credit_service),
):
    try:
        profile = service.get_kyc_profile(user_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="No KYC application found")
    return profile_to_schema(profile)
