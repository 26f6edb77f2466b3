"""GET /v1/credit-limit - caller's installment credit"""

from fastapi import APIRouter, Depends, HTTPException

from saberstore.api.v1.schemas import CreditLimitResponse
from saberstore.api.v1.admin import credit_to_response
from saberstore.api.dependencies import get_credit_service, get_current_user_id
from saberstore.domain.exceptions import NotFoundError
from saberstore.services.credit import CreditService

router = APIRouter()


@router.get("/credit-limit", response_model=CreditLimitResponse)
def get_credit_limit(
    user_id: str = Depends(get_current_user_id),
    service: CreditService = Depends(get_credit_service),
):
    try:
        credit = service.get_credit_limit(user_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="No credit limit approved yet")
    return credit_to_response(credit)
