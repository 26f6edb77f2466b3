"""Customer credit limits - KYC approval and reservation at contract time"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from saberstore.domain.amortization import round_money, to_decimal
from saberstore.domain.exceptions import (
    CreditLimitExceededError,
    CustomerNotFoundError,
    NotFoundError,
    ValidationError,
)
from saberstore.domain.models import CreditStatus, KycStatus
from saberstore.infrastructure.database.models import CreditLimit, CustomerProfile
from saberstore.infrastructure.database.repositories import CreditRepository


class CreditService:
    """Sets and consumes installment credit"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CreditRepository(db)

    def approve_kyc(
        self,
        user_id: str,
        total_limit: Decimal,
        approved_by: Optional[str],
        phone_number: str,
        full_name: Optional[str] = None,
    ) -> CreditLimit:
        """
        Approve a customer's KYC and grant a total credit limit.

        Re-approval replaces the total; remaining = total - outstanding balance.
        Profile and limit are written in one transaction.
        """
        limit = to_decimal(total_limit)
        if limit < 0:
            raise ValidationError("Credit limit cannot be negative")
        if not phone_number:
            raise ValidationError("Phone number is required for installment contracts")

        try:
            self.repo.upsert_profile(
                user_id=user_id,
                phone_number=phone_number,
                kyc_status=KycStatus.APPROVED.value,
                approved_by=approved_by,
                full_name=full_name,
            )
            credit = self.repo.set_credit_limit(user_id, round_money(limit), approved_by)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return credit

    def submit_kyc(
        self,
        user_id: str,
        phone_number: str,
        national_id: str,
        monthly_salary: Decimal,
        employer: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> CustomerProfile:
        """
        Customer submits (or resubmits) a KYC application for review.

        A rejected applicant may resubmit; an approved one may not.
        """
        if not phone_number:
            raise ValidationError("Phone number is required for installment contracts")
        if not national_id or not national_id.strip():
            raise ValidationError("National ID is required")
        salary = to_decimal(monthly_salary)
        if salary < 0:
            raise ValidationError("Monthly salary cannot be negative")

        existing = self.repo.get_profile(user_id)
        if existing is not None and existing.kyc_status == KycStatus.APPROVED.value:
            raise ValidationError(f"KYC for user {user_id} is already approved")

        try:
            profile = self.repo.submit_profile(
                user_id=user_id,
                phone_number=phone_number,
                full_name=full_name,
                national_id=national_id.strip(),
                monthly_salary=round_money(salary),
                employer=employer,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return profile

    def get_kyc_profile(self, user_id: str) -> CustomerProfile:
        profile = self.repo.get_profile(user_id)
        if profile is None:
            raise CustomerNotFoundError(user_id)
        return profile

    def list_pending_kyc(self, limit: int = 20, offset: int = 0) -> List[CustomerProfile]:
        if limit < 1 or offset < 0:
            raise ValidationError("limit must be positive and offset non-negative")
        return self.repo.get_pending_profiles(limit=limit, offset=offset)

    def reject_kyc(self, user_id: str, rejected_by: str, reason: str) -> CustomerProfile:
        """
        Refuse a customer's KYC.

        Any existing credit line is suspended so no new contracts can draw on
        it; the outstanding balance of signed contracts is left as is.
        """
        if not reason or not reason.strip():
            raise ValidationError("A rejection reason is required")

        profile = self.get_kyc_profile(user_id)
        try:
            self.repo.reject_profile(profile, rejected_by, reason.strip())
            self.repo.set_credit_status(user_id, CreditStatus.SUSPENDED.value)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return profile

    def get_credit_limit(self, user_id: str) -> CreditLimit:
        credit = self.repo.get_credit_limit(user_id)
        if credit is None:
            raise NotFoundError(f"No credit limit for user {user_id}")
        return credit

    def reserve(self, user_id: str, amount: Decimal) -> CreditLimit:
        """
        Consume credit for a new contract inside the caller's transaction.

        Locks the limit row; does not commit.
        """
        required = round_money(to_decimal(amount))
        credit = self.repo.get_credit_limit(user_id, for_update=True)

        if credit is None:
            raise CreditLimitExceededError(
                user_id, required, reason=f"User {user_id} has no approved credit limit"
            )
        if credit.status != CreditStatus.ACTIVE.value:
            raise CreditLimitExceededError(
                user_id, required, credit.remaining_limit, reason=f"Credit line for user {user_id} is {credit.status}"
            )
        if credit.remaining_limit < required:
            raise CreditLimitExceededError(user_id, required, credit.remaining_limit)

        credit.remaining_limit = credit.remaining_limit - required
        credit.current_balance = (credit.current_balance or Decimal("0")) + required
        self.db.flush()
        return credit
