"""Integration tests for KYC credit approval and reservation"""

import pytest
from decimal import Decimal

from saberstore.domain.exceptions import CreditLimitExceededError, CustomerNotFoundError, NotFoundError, ValidationError
from saberstore.infrastructure.database.models import CreditLimit, CustomerProfile
from saberstore.services.credit import CreditService


def test_approve_kyc_creates_profile_and_limit(db):
    credit = CreditService(db).approve_kyc("user_1", Decimal("30000"), "admin_1", "01512345678", "Omar Adel")

    assert credit.total_limit == Decimal("30000.00")
    assert credit.remaining_limit == Decimal("30000.00")
    assert credit.current_balance == Decimal("0.00")
    assert credit.status == "Active"

    profile = db.get(CustomerProfile, "user_1")
    assert profile.kyc_status == "Approved"
    assert profile.phone_number == "01512345678"
    assert profile.approved_by == "admin_1"


def test_reapproval_keeps_outstanding_balance(db):
    service = CreditService(db)
    service.approve_kyc("user_1", Decimal("30000"), "admin_1", "01512345678")
    service.reserve("user_1", Decimal("10000"))
    db.commit()

    credit = service.approve_kyc("user_1", Decimal("40000"), "admin_2", "01512345678")

    assert credit.total_limit == Decimal("40000.00")
    assert credit.current_balance == Decimal("10000.00")
    assert credit.remaining_limit == Decimal("30000.00")


def test_reserve_rounds_to_cents_and_moves_balance(db):
    service = CreditService(db)
    service.approve_kyc("user_1", Decimal("1000"), "admin_1", "01512345678")

    credit = service.reserve("user_1", Decimal("100.005"))

    assert credit.remaining_limit == Decimal("899.99")
    assert credit.current_balance == Decimal("100.01")


def test_reserve_beyond_remaining_limit(db):
    service = CreditService(db)
    service.approve_kyc("user_1", Decimal("1000"), "admin_1", "01512345678")

    with pytest.raises(CreditLimitExceededError) as exc_info:
        service.reserve("user_1", Decimal("1000.01"))

    assert exc_info.value.required == Decimal("1000.01")
    assert exc_info.value.remaining == Decimal("1000.00")


def test_reserve_without_limit(db):
    with pytest.raises(CreditLimitExceededError):
        CreditService(db).reserve("stranger", Decimal("1"))


def test_reserve_on_frozen_line(db):
    service = CreditService(db)
    credit = service.approve_kyc("user_1", Decimal("1000"), "admin_1", "01512345678")
    credit.status = "Frozen"
    db.commit()

    with pytest.raises(CreditLimitExceededError):
        service.reserve("user_1", Decimal("1"))


def test_get_credit_limit_missing(db):
    with pytest.raises(NotFoundError):
        CreditService(db).get_credit_limit("stranger")


@pytest.mark.parametrize("limit, phone", [(Decimal("-1"), "01512345678"), (Decimal("1000"), "")])
def test_approve_kyc_validation(db, limit, phone):
    with pytest.raises(ValidationError):
        CreditService(db).approve_kyc("user_1", limit, "admin_1", phone)


def submit(service: CreditService, user_id: str, national_id: str = "29001011234567"):
    return service.submit_kyc(user_id, "01512345678", national_id, Decimal("12000"), employer="Nile Foods")


def test_submit_kyc_queues_application(db):
    profile = submit(CreditService(db), "user_1")

    assert profile.kyc_status == "Pending"
    assert profile.kyc_submitted_at is not None
    assert profile.monthly_salary == Decimal("12000.00")
    assert db.query(CreditLimit).count() == 0


def test_pending_kyc_oldest_first_and_paged(db):
    service = CreditService(db)
    for user_id in ("user_a", "user_b", "user_c"):
        submit(service, user_id)
    service.approve_kyc("user_b", Decimal("5000"), "admin_1", "01512345678")

    assert [p.user_id for p in service.list_pending_kyc()] == ["user_a", "user_c"]
    assert [p.user_id for p in service.list_pending_kyc(limit=1, offset=1)] == ["user_c"]


def test_list_pending_kyc_rejects_bad_paging(db):
    with pytest.raises(ValidationError):
        CreditService(db).list_pending_kyc(limit=0)


def test_reject_kyc_suspends_credit_line_and_keeps_balance(db):
    service = CreditService(db)
    service.approve_kyc("user_1", Decimal("30000"), "admin_1", "01512345678")
    service.reserve("user_1", Decimal("10000"))
    db.commit()

    profile = service.reject_kyc("user_1", "admin_2", "  Forged utility bill  ")

    assert profile.kyc_status == "Rejected"
    assert profile.approved_by == "admin_2"
    assert profile.rejection_reason == "Forged utility bill"
    assert profile.kyc_approved_at is None

    credit = service.get_credit_limit("user_1")
    assert credit.status == "Suspended"
    assert credit.current_balance == Decimal("10000.00")
    with pytest.raises(CreditLimitExceededError):
        service.reserve("user_1", Decimal("1"))


def test_reject_pending_application_without_credit_line(db):
    service = CreditService(db)
    submit(service, "user_1")

    assert service.reject_kyc("user_1", "admin_1", "Unreadable ID").kyc_status == "Rejected"
    assert db.query(CreditLimit).count() == 0


def test_reject_kyc_unknown_user(db):
    with pytest.raises(CustomerNotFoundError):
        CreditService(db).reject_kyc("stranger", "admin_1", "No documents")


def test_reject_kyc_requires_reason(db):
    service = CreditService(db)
    submit(service, "user_1")

    with pytest.raises(ValidationError):
        service.reject_kyc("user_1", "admin_1", "   ")
    assert service.get_kyc_profile("user_1").kyc_status == "Pending"


def test_resubmission_after_rejection_and_after_approval(db):
    service = CreditService(db)
    submit(service, "user_1")
    service.reject_kyc("user_1", "admin_1", "Blurry scan")

    profile = submit(service, "user_1", national_id="29001011234568")
    assert profile.kyc_status == "Pending"
    assert profile.rejection_reason is None

    service.approve_kyc("user_1", Decimal("5000"), "admin_1", "01512345678")
    with pytest.raises(ValidationError):
        submit(service, "user_1")


@pytest.mark.parametrize("national_id, salary", [("", Decimal("12000")), ("29001011234567", Decimal("-1"))])
def test_submit_kyc_validation(db, national_id, salary):
    with pytest.raises(ValidationError):
        CreditService(db).submit_kyc("user_1", "01512345678", national_id, salary)
