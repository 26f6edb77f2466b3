"""Prometheus metrics for monitoring order volume, installment financing, and webhook performance"""

from decimal import Decimal
from prometheus_client import Counter, Histogram

# Order metrics
order_counter = Counter(
    "saberstore_orders_total",
    "Total orders created",
    ["payment_method"],  # card | fawry | wallet | installment
)

order_failure_counter = Counter(
    "saberstore_order_failures_total",
    "Orders rejected and rolled back",
    ["reason"],  # validation | not_found | invalid_plan | insufficient_stock | credit_limit | transaction
)

# Installment metrics
contract_counter = Counter(
    "saberstore_contracts_total",
    "Installment contracts created",
    ["duration_months"],
)

financed_amount_histogram = Histogram(
    "saberstore_financed_amount_egp",
    "Amount financed per installment contract (after down payment, incl. interest)",
    buckets=[1_000, 5_000, 10_000, 25_000, 50_000, 100_000, 250_000],
)

# Inventory sync webhook metrics
webhook_latency_histogram = Histogram(
    "inventory_sync_latency_seconds",
    "Inventory sync webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "inventory_sync_failures_total",
    "Failed inventory sync webhook deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_order(payment_method: str) -> None:
    order_counter.labels(payment_method=payment_method).inc()


def record_order_failure(reason: str) -> None:
    order_failure_counter.labels(reason=reason).inc()


def record_contract(duration_months: int, financed_amount: Decimal) -> None:
    """Record contract volume and the financed-amount distribution"""
    contract_counter.labels(duration_months=str(duration_months)).inc()
    financed_amount_histogram.observe(float(financed_amount))
