"""Pydantic schemas for API request/response validation"""

import uuid
from pydantic import BaseModel, Field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from saberstore.domain.models import DeliveryMethod, PaymentMethod


class OrderItemRequest(BaseModel):
    """Cart line in POST /v1/orders"""

    product_id: uuid.UUID
    quantity: int = Field(..., description="Units to buy (at least 1)")
    warranty_months: int = Field(0, description="Extended warranty, 0 for none")


class CreateOrderRequest(BaseModel):
    """Request body for POST /v1/orders"""

    items: List[OrderItemRequest]
    delivery_method: DeliveryMethod
    delivery_address: Optional[str] = None
    governorate: Optional[str] = None
    pickup_branch: Optional[str] = None
    payment_method: PaymentMethod
    installment_plan_id: Optional[uuid.UUID] = None
    down_payment_percent: Optional[Decimal] = Field(
        None, description="Down payment chosen by the customer; defaults to the plan minimum"
    )


class ScheduleEntrySchema(BaseModel):
    """Single monthly installment"""

    installment_number: int
    due_date: date
    amount: Decimal
    status: str = "Pending"


class ContractSchema(BaseModel):
    """Installment contract attached to an order"""

    contract_id: str
    contract_number: str
    plan_id: str
    duration_months: int
    down_payment_percent: Decimal
    down_payment_amount: Decimal
    financed_principal: Decimal
    total_interest: Decimal
    total_financed_amount: Decimal
    monthly_payment_amount: Decimal
    start_date: date
    end_date: date
    status: str
    payment_schedule: List[ScheduleEntrySchema]


class OrderItemSchema(BaseModel):
    """Order line as purchased"""

    product_id: str
    product_name: Optional[str] = None
    quantity: int
    price_at_purchase: Decimal
    warranty_months: int


class OrderResponse(BaseModel):
    """Response for POST /v1/orders and GET /v1/orders/{order_id}"""

    order_id: str
    order_number: str
    user_id: str
    status: str
    payment_method: str
    delivery_method: str
    delivery_address: Optional[str] = None
    governorate: Optional[str] = None
    pickup_branch: Optional[str] = None
    total_amount: Decimal
    items: List[OrderItemSchema]
    contract: Optional[ContractSchema] = None
    created_at: str


class OrderListResponse(BaseModel):
    """Response for GET /v1/orders"""

    user_id: str
    orders: List[OrderResponse]


class PlanSchema(BaseModel):
    """Financing plan offered at checkout"""

    plan_id: str
    name: str
    duration_months: int
    interest_rate_percent: Decimal
    min_down_payment_percent: Decimal
    is_active: bool


class PlanListResponse(BaseModel):
    """Response for GET /v1/installments/plans"""

    plans: List[PlanSchema]


class CalculateRequest(BaseModel):
    """Request body for POST /v1/installments/calculate"""

    amount: Decimal = Field(..., description="Cash price in EGP")
    plan_id: uuid.UUID
    down_payment_percent: Optional[Decimal] = None


class CalculationResponse(BaseModel):
    """Response for POST /v1/installments/calculate"""

    plan_id: str
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
    schedule: List[ScheduleEntrySchema]


class CreatePlanRequest(BaseModel):
    """Request body for POST /v1/admin/plans"""

    name: str = Field(..., min_length=1)
    duration_months: int
    interest_rate_percent: Decimal = Decimal("0")
    min_down_payment_percent: Decimal = Decimal("0")


class ApproveKycRequest(BaseModel):
    """Request body for POST /v1/admin/kyc/{user_id}/approve"""

    total_limit: Decimal = Field(..., description="Total installment credit in EGP")
    phone_number: str = Field(..., min_length=1)
    full_name: Optional[str] = None


class CreditLimitResponse(BaseModel):
    """Customer's installment credit"""

    user_id: str
    total_limit: Decimal
    remaining_limit: Decimal
    current_balance: Decimal
    status: str


class SubmitKycRequest(BaseModel):
    """Request body for POST /v1/kyc/submit"""

    phone_number: str = Field(..., min_length=1)
    national_id: str = Field(..., min_length=1)
    monthly_salary: Decimal = Field(..., description="Declared monthly income in EGP")
    employer: Optional[str] = None
    full_name: Optional[str] = None


class RejectKycRequest(BaseModel):
    """Request body for POST /v1/admin/kyc/{user_id}/reject"""

    reason: str = Field(..., min_length=1)


class KycProfileSchema(BaseModel):
    """Customer's KYC application and review outcome"""

    user_id: str
    full_name: Optional[str] = None
    phone_number: str
    national_id: Optional[str] = None
    monthly_salary: Optional[Decimal] = None
    employer: Optional[str] = None
    kyc_status: str
    kyc_submitted_at: Optional[str] = None
    reviewed_by: Optional[str] = None
    rejection_reason: Optional[str] = None


class PendingKycResponse(BaseModel):
    """Response for GET /v1/admin/kyc/pending"""

    profiles: List[KycProfileSchema]


class AnalyticsResponse(BaseModel):
    """Response for GET /v1/admin/analytics"""

    total_customers: int
    total_orders: int
    total_sales: Decimal
    pending_kyc: int
