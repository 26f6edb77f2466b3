"""Order creation workflow - stock, order, contract, and schedule in one transaction"""

import uuid
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from saberstore.config import settings
from saberstore.domain.amortization import calculate, generate_schedule
from saberstore.domain.exceptions import (
    CustomerNotFoundError,
    DomainException,
    InsufficientStockError,
    KycNotApprovedError,
    MissingPlanError,
    OrderNotFoundError,
    ProductNotFoundError,
    TransactionFailure,
    ValidationError,
)
from saberstore.domain.models import (
    AmortizationResult,
    ContractStatus,
    DeliveryInfo,
    DeliveryMethod,
    KycStatus,
    OrderLine,
    OrderStatus,
    PaymentMethod,
)
from saberstore.infrastructure.database.models import InstallmentPlan, Order, OrderItem, Product
from saberstore.infrastructure.database.repositories import (
    ContractRepository,
    CreditRepository,
    OrderRepository,
    ProductRepository,
    SequenceRepository,
    format_document_number,
)
from saberstore.services.credit import CreditService
from saberstore.services.installments import InstallmentService


class OrderService:
    """
    Creates orders and, for installment payments, their contracts.

    Stateless apart from the session: construct one per request.
    """

    def __init__(
        self,
        db: Session,
        clock: Callable[[], date] = date.today,
        enforce_credit_limit: Optional[bool] = None,
    ):
        self.db = db
        self.clock = clock
        self.enforce_credit_limit = (
            settings.enforce_credit_limit if enforce_credit_limit is None else enforce_credit_limit
        )
        self.products = ProductRepository(db)
        self.orders = OrderRepository(db)
        self.contracts = ContractRepository(db)
        self.sequences = SequenceRepository(db)
        self.customers = CreditRepository(db)
        self.installments = InstallmentService(db, clock)
        self.credit = CreditService(db)

    def create_order(
        self,
        user_id: str,
        items: List[OrderLine],
        delivery: DeliveryInfo,
        payment_method: PaymentMethod,
        installment_plan_id: Optional[uuid.UUID] = None,
        down_payment_percent: Optional[Decimal] = None,
    ) -> Order:
        """
        Validate the cart, then atomically persist the order.

        Flow:
        1. Validate lines, delivery, products, stock, and plan (no writes)
        2. Decrement stock with a conditional update per line
        3. Create order + items with the next ORD number
        4. Installment: reserve credit, create contract + payment schedule
        5. Commit; any failure rolls back every write, stock included

        Raises:
            ValidationError / MissingPlanError: malformed request
            ProductNotFoundError: unknown or inactive product
            InsufficientStockError: stock cannot cover a line
            InvalidPlanError: unknown or inactive financing plan
            CustomerNotFoundError: installment buyer without KYC profile
            KycNotApprovedError: installment buyer whose KYC is pending or rejected
            CreditLimitExceededError: financed amount above remaining credit
            TransactionFailure: database error; nothing was written
        """
        try:
            order = self._create_order(
                user_id, items, delivery, payment_method, installment_plan_id, down_payment_percent
            )
            self.db.commit()
        except DomainException:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            raise TransactionFailure(f"Order could not be saved ({e.__class__.__name__}); no changes were made") from e

        return order

    def _create_order(
        self,
        user_id: str,
        items: List[OrderLine],
        delivery: DeliveryInfo,
        payment_method: PaymentMethod,
        installment_plan_id: Optional[uuid.UUID],
        down_payment_percent: Optional[Decimal],
    ) -> Order:
        # 1. Validation (fail fast, before any mutation)
        self._validate_request(items, delivery)
        products = self._load_products(items)
        self._check_stock(items, products)

        plan: Optional[InstallmentPlan] = None
        phone_number = None
        if payment_method == PaymentMethod.INSTALLMENT:
            if installment_plan_id is None:
                raise MissingPlanError()
            plan = self.installments.get_active_plan(installment_plan_id)
            profile = self.customers.get_profile(user_id)
            if profile is None:
                raise CustomerNotFoundError(user_id)
            if profile.kyc_status != KycStatus.APPROVED.value:
                raise KycNotApprovedError(user_id, profile.kyc_status)
            phone_number = profile.phone_number

        # Price captured now is the price of record for this order
        order_items = [
            OrderItem(
                product_id=line.product_id,
                quantity=line.quantity,
                price_at_purchase=products[line.product_id].cash_price,
                warranty_months=line.warranty_months,
            )
            for line in items
        ]
        total_amount = sum(
            (item.price_at_purchase * item.quantity for item in order_items), Decimal("0")
        )

        calculation: Optional[AmortizationResult] = None
        if plan is not None:
            calculation = calculate(total_amount, plan.to_domain(), down_payment_percent)

        # 2. Stock
        for line in items:
            if not self.products.decrement_stock(line.product_id, line.quantity):
                # Stock moved since validation; report the current figure
                product = products[line.product_id]
                self.db.refresh(product)
                raise InsufficientStockError(product.id, product.name, line.quantity, product.stock_qty)

        # 3. Order
        today = self.clock()
        order_number = format_document_number(
            settings.order_number_prefix,
            today.year,
            self.sequences.next_value(f"order-{today.year}"),
        )
        order = self.orders.create_order(
            order_number=order_number,
            user_id=user_id,
            total_amount=total_amount,
            payment_method=payment_method.value,
            delivery=delivery,
            items=order_items,
            status=OrderStatus.PENDING.value,
        )

        # 4. Contract + schedule
        if calculation is not None:
            if self.enforce_credit_limit:
                self.credit.reserve(user_id, calculation.total_financed_with_interest)

            contract_number = format_document_number(
                settings.contract_number_prefix,
                today.year,
                self.sequences.next_value(f"contract-{today.year}"),
            )
            schedule = generate_schedule(today, calculation.duration_months, calculation.monthly_payment)
            self.contracts.create_contract(
                contract_number=contract_number,
                order=order,
                plan_id=plan.id,
                calculation=calculation,
                schedule=schedule,
                phone_number=phone_number,
                start_date=today,
                status=ContractStatus.ACTIVE.value,
            )

        return order

    def _validate_request(self, items: List[OrderLine], delivery: DeliveryInfo) -> None:
        if not items:
            raise ValidationError("Order must contain at least one item")
        for line in items:
            if line.quantity < 1:
                raise ValidationError(f"Quantity for product {line.product_id} must be at least 1")
            if line.warranty_months < 0:
                raise ValidationError(f"Warranty for product {line.product_id} cannot be negative")

        if delivery.method == DeliveryMethod.DELIVERY and not delivery.address:
            raise ValidationError("Delivery address is required for home delivery")
        if delivery.method == DeliveryMethod.PICKUP and not delivery.pickup_branch:
            raise ValidationError("Pickup branch is required for store pickup")

    def _load_products(self, items: List[OrderLine]) -> Dict[uuid.UUID, Product]:
        products = self.products.get_products_by_ids(line.product_id for line in items)
        for line in items:
            product = products.get(line.product_id)
            if product is None or not product.is_active:
                raise ProductNotFoundError(line.product_id)
        return products

    def _check_stock(self, items: List[OrderLine], products: Dict[uuid.UUID, Product]) -> None:
        # Duplicate lines for one product draw from the same stock
        requested: Dict[uuid.UUID, int] = defaultdict(int)
        for line in items:
            requested[line.product_id] += line.quantity

        for product_id, quantity in requested.items():
            product = products[product_id]
            if product.stock_qty < quantity:
                raise InsufficientStockError(product.id, product.name, quantity, product.stock_qty)

    def get_user_orders(self, user_id: str) -> List[Order]:
        return self.orders.get_orders_by_user(user_id)

    def get_order_by_id(self, order_id: uuid.UUID, user_id: Optional[str] = None) -> Order:
        """Another user's order is reported exactly like a missing one"""
        order = self.orders.get_order_by_id(order_id, user_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order
