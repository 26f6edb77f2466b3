"""SQLAlchemy ORM models for catalog, orders, and installment contracts"""

import uuid
from sqlalchemy import (
    Column,
    String,
    BigInteger,
    Boolean,
    Numeric,
    DateTime,
    Date,
    Integer,
    ForeignKey,
    Text,
    Uuid,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

from saberstore.domain.models import FinancingPlan

Base = declarative_base()

Money = Numeric(12, 2)
Percent = Numeric(5, 2)


class Product(Base):
    """Sellable catalog item (owned by the catalog service, stock decremented here)"""

    __tablename__ = "product"
    __table_args__ = (CheckConstraint("stock_qty >= 0", name="ck_product_stock_non_negative"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    brand = Column(Text, nullable=True)
    cash_price = Column(Money, nullable=False)
    stock_qty = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class InstallmentPlan(Base):
    """Financing plan offered at checkout; deactivated, never deleted"""

    __tablename__ = "installment_plan"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    duration_months = Column(Integer, nullable=False)
    interest_rate_percent = Column(Percent, nullable=False, default=0)
    min_down_payment_percent = Column(Percent, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def to_domain(self) -> FinancingPlan:
        return FinancingPlan(
            id=self.id,
            name=self.name,
            duration_months=self.duration_months,
            interest_rate_percent=self.interest_rate_percent,
            min_down_payment_percent=self.min_down_payment_percent,
            is_active=self.is_active,
        )


class CustomerProfile(Base):
    """KYC profile of a storefront user"""

    __tablename__ = "customer_profile"

    user_id = Column(Text, primary_key=True)
    full_name = Column(Text, nullable=True)
    phone_number = Column(Text, nullable=False)
    national_id = Column(Text, nullable=True)
    monthly_salary = Column(Money, nullable=True)
    employer = Column(Text, nullable=True)
    kyc_status = Column(Text, nullable=False, default="Pending")
    kyc_submitted_at = Column(DateTime(timezone=True), nullable=True)
    kyc_approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(Text, nullable=True)  # reviewer, for approvals and rejections
    rejection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CreditLimit(Base):
    """Installment credit granted to a customer after KYC approval"""

    __tablename__ = "credit_limit"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, unique=True)
    total_limit = Column(Money, nullable=False)
    remaining_limit = Column(Money, nullable=False)
    current_balance = Column(Money, nullable=False, default=0)
    status = Column(Text, nullable=False, default="Active")
    approved_by = Column(Text, nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)


class Order(Base):
    """Customer order; owns its items exclusively"""

    __tablename__ = "orders"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_number = Column(String(32), nullable=False, unique=True)
    user_id = Column(Text, nullable=False, index=True)
    total_amount = Column(Money, nullable=False)
    status = Column(Text, nullable=False, default="Pending")
    payment_method = Column(Text, nullable=False)
    delivery_method = Column(Text, nullable=False)
    delivery_address = Column(Text, nullable=True)
    governorate = Column(Text, nullable=True)
    pickup_branch = Column(Text, nullable=True)
    source = Column(Text, nullable=False, default="saberstore")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    contract = relationship("InstallmentContract", back_populates="order", uselist=False)


class OrderItem(Base):
    """Order line with the price captured at purchase time"""

    __tablename__ = "order_item"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(Uuid(as_uuid=True), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("product.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    price_at_purchase = Column(Money, nullable=False)
    warranty_months = Column(Integer, nullable=False, default=0)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")


class InstallmentContract(Base):
    """Financing agreement created alongside an installment order"""

    __tablename__ = "installment_contract"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    contract_number = Column(String(32), nullable=False, unique=True)
    order_id = Column(Uuid(as_uuid=True), ForeignKey("orders.id"), nullable=False, unique=True)
    user_id = Column(Text, nullable=False, index=True)
    plan_id = Column(Uuid(as_uuid=True), ForeignKey("installment_plan.id"), nullable=False)
    duration_months = Column(Integer, nullable=False)
    down_payment_percent = Column(Percent, nullable=False)
    down_payment_amount = Column(Money, nullable=False)
    financed_principal = Column(Money, nullable=False)
    total_interest = Column(Money, nullable=False)
    total_financed_amount = Column(Money, nullable=False)
    monthly_payment_amount = Column(Money, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    phone_number = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="Active")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    order = relationship("Order", back_populates="contract")
    plan = relationship("InstallmentPlan")
    payment_schedule = relationship(
        "PaymentSchedule",
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="PaymentSchedule.installment_number",
    )


class PaymentSchedule(Base):
    """Individual monthly installment within a contract"""

    __tablename__ = "payment_schedule"
    __table_args__ = (UniqueConstraint("contract_id", "installment_number", name="uq_schedule_installment"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    contract_id = Column(
        Uuid(as_uuid=True), ForeignKey("installment_contract.id", ondelete="CASCADE"), nullable=False
    )
    installment_number = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=False)
    amount = Column(Money, nullable=False)
    status = Column(Text, nullable=False, default="Pending")
    paid_at = Column(DateTime(timezone=True), nullable=True)

    contract = relationship("InstallmentContract", back_populates="payment_schedule")


class SequenceCounter(Base):
    """Named counter row backing order and contract numbers"""

    __tablename__ = "sequence_counter"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True)
    current_value = Column(BigInteger, nullable=False, default=0)
