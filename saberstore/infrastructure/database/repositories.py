"""Data access layer for catalog, credit, order, and contract entities"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from saberstore.domain.models import AmortizationResult, DeliveryInfo, ScheduleEntry
from saberstore.domain.amortization import round_money
from saberstore.infrastructure.database.models import (
    CreditLimit,
    CustomerProfile,
    InstallmentContract,
    InstallmentPlan,
    Order,
    OrderItem,
    PaymentSchedule,
    Product,
    SequenceCounter,
)


class ProductRepository:
    """Repository for catalog products and their stock"""

    def __init__(self, db: Session):
        self.db = db

    def add_product(
        self,
        name: str,
        cash_price: Decimal,
        stock_qty: int,
        brand: Optional[str] = None,
        is_active: bool = True,
    ) -> Product:
        """Insert a catalog product (catalog import and fixtures)"""
        product = Product(name=name, brand=brand, cash_price=cash_price, stock_qty=stock_qty, is_active=is_active)
        self.db.add(product)
        self.db.flush()
        return product

    def get_products_by_ids(self, product_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, Product]:
        """Fetch products keyed by id; unknown ids are simply absent"""
        ids = list(set(product_ids))
        if not ids:
            return {}
        products = self.db.query(Product).filter(Product.id.in_(ids)).all()
        return {p.id: p for p in products}

    def decrement_stock(self, product_id: uuid.UUID, quantity: int) -> bool:
        """
        Atomically take quantity units out of stock.

        Single conditional UPDATE, so two concurrent orders can never both
        consume the last units. Returns False when stock is insufficient.
        """
        updated = (
            self.db.query(Product)
            .filter(Product.id == product_id, Product.stock_qty >= quantity)
            .update({Product.stock_qty: Product.stock_qty - quantity}, synchronize_session=False)
        )
        return updated == 1


class PlanRepository:
    """Repository for financing plans"""

    def __init__(self, db: Session):
        self.db = db

    def create_plan(
        self,
        name: str,
        duration_months: int,
        interest_rate_percent: Decimal,
        min_down_payment_percent: Decimal,
        is_active: bool = True,
    ) -> InstallmentPlan:
        plan = InstallmentPlan(
            name=name,
            duration_months=duration_months,
            interest_rate_percent=interest_rate_percent,
            min_down_payment_percent=min_down_payment_percent,
            is_active=is_active,
        )
        self.db.add(plan)
        self.db.flush()
        return plan

    def get_plan_by_id(self, plan_id: uuid.UUID) -> Optional[InstallmentPlan]:
        return self.db.query(InstallmentPlan).filter(InstallmentPlan.id == plan_id).first()

    def get_active_plans(self) -> List[InstallmentPlan]:
        """Active plans, shortest term first"""
        return (
            self.db.query(InstallmentPlan)
            .filter(InstallmentPlan.is_active.is_(True))
            .order_by(InstallmentPlan.duration_months.asc())
            .all()
        )


class CreditRepository:
    """Repository for customer profiles and credit limits"""

    def __init__(self, db: Session):
        self.db = db

    def get_profile(self, user_id: str) -> Optional[CustomerProfile]:
        return self.db.query(CustomerProfile).filter(CustomerProfile.user_id == user_id).first()

    def get_pending_profiles(self, limit: int = 20, offset: int = 0) -> List[CustomerProfile]:
        """Applications awaiting review, oldest submission first"""
        return (
            self.db.query(CustomerProfile)
            .filter(CustomerProfile.kyc_status == "Pending")
            .order_by(CustomerProfile.kyc_submitted_at.asc(), CustomerProfile.user_id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def count_profiles(self, kyc_status: Optional[str] = None) -> int:
        query = self.db.query(CustomerProfile)
        if kyc_status is not None:
            query = query.filter(CustomerProfile.kyc_status == kyc_status)
        return query.count()

    def submit_profile(
        self,
        user_id: str,
        phone_number: str,
        full_name: Optional[str],
        national_id: str,
        monthly_salary: Decimal,
        employer: Optional[str],
    ) -> CustomerProfile:
        """Create or refresh an application and put it back in the review queue"""
        profile = self.get_profile(user_id)
        if profile is None:
            profile = CustomerProfile(user_id=user_id, phone_number=phone_number)
            self.db.add(profile)

        profile.phone_number = phone_number
        if full_name is not None:
            profile.full_name = full_name
        profile.national_id = national_id
        profile.monthly_salary = monthly_salary
        profile.employer = employer
        profile.kyc_status = "Pending"
        profile.kyc_submitted_at = datetime.now(timezone.utc)
        profile.rejection_reason = None
        self.db.flush()
        return profile

    def upsert_profile(
        self,
        user_id: str,
        phone_number: str,
        kyc_status: str,
        approved_by: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> CustomerProfile:
        profile = self.get_profile(user_id)
        if profile is None:
            profile = CustomerProfile(user_id=user_id, phone_number=phone_number)
            self.db.add(profile)

        profile.phone_number = phone_number
        if full_name is not None:
            profile.full_name = full_name
        profile.kyc_status = kyc_status
        profile.approved_by = approved_by
        profile.kyc_approved_at = datetime.now(timezone.utc)
        profile.rejection_reason = None
        self.db.flush()
        return profile

    def reject_profile(self, profile: CustomerProfile, rejected_by: str, reason: str) -> CustomerProfile:
        profile.kyc_status = "Rejected"
        profile.approved_by = rejected_by
        profile.rejection_reason = reason
        profile.kyc_approved_at = None
        self.db.flush()
        return profile

    def get_credit_limit(self, user_id: str, for_update: bool = False) -> Optional[CreditLimit]:
        query = self.db.query(CreditLimit).filter(CreditLimit.user_id == user_id)
        if for_update:
            # Row lock held until the order transaction ends
            query = query.with_for_update().populate_existing()
        return query.first()

    def set_credit_status(self, user_id: str, status: str) -> Optional[CreditLimit]:
        """Change the line's status; outstanding balance is untouched"""
        credit = self.get_credit_limit(user_id, for_update=True)
        if credit is not None:
            credit.status = status
            self.db.flush()
        return credit

    def set_credit_limit(self, user_id: str, total_limit: Decimal, approved_by: Optional[str]) -> CreditLimit:
        """Create or replace the total limit, keeping the outstanding balance"""
        credit = self.get_credit_limit(user_id, for_update=True)
        if credit is None:
            credit = CreditLimit(user_id=user_id, current_balance=Decimal("0"))
            self.db.add(credit)

        balance = credit.current_balance or Decimal("0")
        credit.total_limit = total_limit
        credit.remaining_limit = total_limit - balance
        credit.status = "Active"
        credit.approved_by = approved_by
        credit.approved_at = datetime.now(timezone.utc)
        self.db.flush()
        return credit


class SequenceRepository:
    """
    Monotonic document numbers from locked counter rows.

    Never derives numbers from COUNT(*) + 1. The increment belongs to the
    caller's transaction, so a rolled-back order does not consume a number.
    """

    def __init__(self, db: Session):
        self.db = db

    def next_value(self, name: str) -> int:
        counter = (
            self.db.query(SequenceCounter)
            .filter(SequenceCounter.name == name)
            .with_for_update()
            .populate_existing()
            .one_or_none()
        )

        if counter is None:
            # First number of this sequence; a concurrent creator hits the
            # unique constraint and its transaction fails as a whole
            counter = SequenceCounter(name=name, current_value=1)
            self.db.add(counter)
            self.db.flush()
            return 1

        counter.current_value += 1
        self.db.flush()
        return counter.current_value


def format_document_number(prefix: str, year: int, value: int) -> str:
    """ORD-2026-0007 style identifiers"""
    return f"{prefix}-{year}-{value:04d}"


class OrderRepository:
    """Repository for orders and their items"""

    def __init__(self, db: Session):
        self.db = db

    def create_order(
        self,
        order_number: str,
        user_id: str,
        total_amount: Decimal,
        payment_method: str,
        delivery: DeliveryInfo,
        items: List[OrderItem],
        status: str = "Pending",
    ) -> Order:
        """Persist order and its items without committing"""
        db_order = Order(
            order_number=order_number,
            user_id=user_id,
            total_amount=total_amount,
            status=status,
            payment_method=payment_method,
            delivery_method=delivery.method.value,
            delivery_address=delivery.address,
            governorate=delivery.governorate,
            pickup_branch=delivery.pickup_branch,
        )
        db_order.items = items
        self.db.add(db_order)
        self.db.flush()  # Get ID without committing
        return db_order

    def _with_details(self):
        return self.db.query(Order).options(
            selectinload(Order.items).selectinload(OrderItem.product),
            selectinload(Order.contract).selectinload(InstallmentContract.payment_schedule),
        )

    def get_orders_by_user(self, user_id: str) -> List[Order]:
        """Fetch a user's orders, newest first"""
        return (
            self._with_details()
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.order_number.desc())
            .all()
        )

    def get_order_by_id(self, order_id: uuid.UUID, user_id: Optional[str] = None) -> Optional[Order]:
        """Fetch one order; with user_id, other users' orders are invisible"""
        query = self._with_details().filter(Order.id == order_id)
        if user_id is not None:
            query = query.filter(Order.user_id == user_id)
        return query.first()

    def get_sales_totals(self) -> Tuple[int, Decimal]:
        """Order count and gross sales across all users"""
        count, total = self.db.query(func.count(Order.id), func.coalesce(func.sum(Order.total_amount), 0)).one()
        return count, round_money(Decimal(str(total)))


class ContractRepository:
    """Repository for installment contracts and payment schedules"""

    def __init__(self, db: Session):
        self.db = db

    def create_contract(
        self,
        contract_number: str,
        order: Order,
        plan_id: uuid.UUID,
        calculation: AmortizationResult,
        schedule: List[ScheduleEntry],
        phone_number: str,
        start_date,
        status: str = "Active",
    ) -> InstallmentContract:
        """Create contract with every schedule row in the current transaction"""
        db_contract = InstallmentContract(
            contract_number=contract_number,
            order=order,
            user_id=order.user_id,
            plan_id=plan_id,
            duration_months=calculation.duration_months,
            down_payment_percent=calculation.down_payment_percent,
            down_payment_amount=round_money(calculation.down_payment),
            financed_principal=round_money(calculation.financed_principal),
            total_interest=round_money(calculation.total_interest),
            total_financed_amount=calculation.total_amount,
            monthly_payment_amount=calculation.monthly_payment,
            start_date=start_date,
            end_date=schedule[-1].due_date,
            phone_number=phone_number,
            status=status,
            payment_schedule=[
                PaymentSchedule(
                    installment_number=entry.installment_number,
                    due_date=entry.due_date,
                    amount=entry.amount,
                    status=entry.status.value,
                )
                for entry in schedule
            ],
        )
        self.db.add(db_contract)
        self.db.flush()
        return db_contract
