"""Domain models - pure Python dataclasses representing business entities"""

import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class PaymentMethod(str, Enum):
    CARD = "card"
    FAWRY = "fawry"
    WALLET = "wallet"
    INSTALLMENT = "installment"


class DeliveryMethod(str, Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"


class OrderStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class ContractStatus(str, Enum):
    ACTIVE = "Active"
    COMPLETED = "Completed"
    DEFAULTED = "Defaulted"
    CANCELLED = "Cancelled"


class ScheduleStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    OVERDUE = "Overdue"
    LATE = "Late"


class KycStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class CreditStatus(str, Enum):
    ACTIVE = "Active"
    FROZEN = "Frozen"
    SUSPENDED = "Suspended"


@dataclass(frozen=True)
class FinancingPlan:
    """Financing terms offered at checkout"""

    id: Optional[uuid.UUID]
    name: str
    duration_months: int
    interest_rate_percent: Decimal  # flat, over the whole term
    min_down_payment_percent: Decimal
    is_active: bool = True


@dataclass(frozen=True)
class AmortizationResult:
    """
    Output of the installment calculation.

    Intermediate amounts keep full precision; monthly_payment and total_amount
    are rounded to cents independently, so monthly_payment * duration_months
    may drift from total_financed_with_interest by up to duration * 0.005.
    """

    plan_id: Optional[uuid.UUID]
    plan_name: str
    purchase_amount: Decimal
    duration_months: int
    interest_rate_percent: Decimal
    down_payment_percent: Decimal
    down_payment: Decimal
    financed_principal: Decimal
    total_interest: Decimal
    total_financed_with_interest: Decimal
    monthly_payment: Decimal
    total_amount: Decimal


@dataclass
class ScheduleEntry:
    """Single monthly installment in a contract's payment schedule"""

    installment_number: int
    due_date: date
    amount: Decimal
    status: ScheduleStatus = ScheduleStatus.PENDING


@dataclass
class OrderLine:
    """Cart line submitted at checkout"""

    product_id: uuid.UUID
    quantity: int
    warranty_months: int = 0


@dataclass
class DeliveryInfo:
    """Where and how the order is handed over"""

    method: DeliveryMethod
    address: Optional[str] = None
    governorate: Optional[str] = None
    pickup_branch: Optional[str] = None
