"""POST/GET /v1/orders - checkout and order history"""

import time
import uuid
import logging
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request

from saberstore.api.v1.schemas import (
    ContractSchema,
    CreateOrderRequest,
    OrderItemSchema,
    OrderListResponse,
    OrderResponse,
    ScheduleEntrySchema,
)
from saberstore.api.dependencies import (
    get_current_user_id,
    get_inventory_sync_client,
    get_order_service,
    get_request_id,
)
from saberstore.domain.exceptions import (
    CreditLimitExceededError,
    InsufficientStockError,
    InvalidPlanError,
    NotFoundError,
    TransactionFailure,
    ValidationError,
)
from saberstore.domain.models import DeliveryInfo, OrderLine
from saberstore.infrastructure.clients.inventory_sync import InventorySyncClient
from saberstore.infrastructure.database.models import Order
from saberstore.infrastructure.observability.logging import log_order_created, log_order_rejected
from saberstore.infrastructure.observability.metrics import record_contract, record_order, record_order_failure
from saberstore.services.orders import OrderService

router = APIRouter()


def order_to_response(order: Order) -> OrderResponse:
    contract = None
    if order.contract is not None:
        c = order.contract
        contract = ContractSchema(
            contract_id=str(c.id),
            contract_number=c.contract_number,
            plan_id=str(c.plan_id),
            duration_months=c.duration_months,
            down_payment_percent=c.down_payment_percent,
            down_payment_amount=c.down_payment_amount,
            financed_principal=c.financed_principal,
            total_interest=c.total_interest,
            total_financed_amount=c.total_financed_amount,
            monthly_payment_amount=c.monthly_payment_amount,
            start_date=c.start_date,
            end_date=c.end_date,
            status=c.status,
            payment_schedule=[
                ScheduleEntrySchema(
                    installment_number=entry.installment_number,
                    due_date=entry.due_date,
                    amount=entry.amount,
                    status=entry.status,
                )
                for entry in c.payment_schedule
            ],
        )

    return OrderResponse(
        order_id=str(order.id),
        order_number=order.order_number,
        user_id=order.user_id,
        status=order.status,
        payment_method=order.payment_method,
        delivery_method=order.delivery_method,
        delivery_address=order.delivery_address,
        governorate=order.governorate,
        pickup_branch=order.pickup_branch,
        total_amount=order.total_amount,
        items=[
            OrderItemSchema(
                product_id=str(item.product_id),
                product_name=item.product.name if item.product else None,
                quantity=item.quantity,
                price_at_purchase=item.price_at_purchase,
                warranty_months=item.warranty_months,
            )
            for item in order.items
        ],
        contract=contract,
        created_at=order.created_at.isoformat(),
    )


@router.post("/orders", response_model=OrderResponse, status_code=201)
def create_order(
    request_body: CreateOrderRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    service: OrderService = Depends(get_order_service),
    inventory_sync: InventorySyncClient = Depends(get_inventory_sync_client),
):
    """
    Place an order from the checkout wizard.

    Flow:
    1. Validate items against live stock and price
    2. Decrement stock, create order (+ contract and schedule for installments)
       in one transaction
    3. Notify marketplace inventory sync after commit
    4. Return the order with its contract, if any
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        order = service.create_order(
            user_id=user_id,
            items=[
                OrderLine(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    warranty_months=item.warranty_months,
                )
                for item in request_body.items
            ],
            delivery=DeliveryInfo(
                method=request_body.delivery_method,
                address=request_body.delivery_address,
                governorate=request_body.governorate,
                pickup_branch=request_body.pickup_branch,
            ),
            payment_method=request_body.payment_method,
            installment_plan_id=request_body.installment_plan_id,
            down_payment_percent=request_body.down_payment_percent,
        )

    except ValidationError as e:
        record_order_failure("validation")
        log_order_rejected(request_id, user_id, "validation", str(e))
        raise HTTPException(status_code=400, detail=str(e))

    except NotFoundError as e:
        record_order_failure("not_found")
        log_order_rejected(request_id, user_id, "not_found", str(e))
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidPlanError as e:
        record_order_failure("invalid_plan")
        log_order_rejected(request_id, user_id, "invalid_plan", str(e))
        raise HTTPException(status_code=404, detail=str(e))

    except InsufficientStockError as e:
        record_order_failure("insufficient_stock")
        log_order_rejected(request_id, user_id, "insufficient_stock", str(e))
        raise HTTPException(status_code=409, detail=str(e))

    except CreditLimitExceededError as e:
        record_order_failure("credit_limit")
        log_order_rejected(request_id, user_id, "credit_limit", str(e))
        raise HTTPException(status_code=409, detail=str(e))

    except TransactionFailure as e:
        record_order_failure("transaction")
        logging.error(f"Order transaction failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Order could not be completed, please retry")

    response = order_to_response(order)

    background_tasks.add_task(
        inventory_sync.send_stock_event,
        {
            "event": "STOCK_RESERVED",
            "source": order.source,
            "order_number": order.order_number,
            "items": [
                {"product_id": item.product_id, "quantity": item.quantity}
                for item in response.items
            ],
        },
    )

    # Record metrics and logs
    duration_ms = (time.time() - start_time) * 1000
    record_order(order.payment_method)
    contract_number = None
    if response.contract is not None:
        contract_number = response.contract.contract_number
        record_contract(
            response.contract.duration_months,
            response.contract.total_financed_amount - response.contract.down_payment_amount,
        )
    log_order_created(
        request_id,
        user_id,
        order.order_number,
        order.payment_method,
        order.total_amount,
        contract_number,
        duration_ms,
    )

    return response


@router.get("/orders", response_model=OrderListResponse)
def get_my_orders(
    user_id: str = Depends(get_current_user_id),
    service: OrderService = Depends(get_order_service),
):
    """Caller's orders, newest first"""
    orders = service.get_user_orders(user_id)
    return OrderListResponse(user_id=user_id, orders=[order_to_response(o) for o in orders])


@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: str,
    user_id: str = Depends(get_current_user_id),
    service: OrderService = Depends(get_order_service),
):
    """
    Retrieve one of the caller's orders with contract and payment schedule.

    Orders owned by someone else answer 404, same as unknown ids.
    """
    try:
        order_uuid = uuid.UUID(order_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid order ID format")

    try:
        order = service.get_order_by_id(order_uuid, user_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")

    return order_to_response(order)
