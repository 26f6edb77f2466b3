"""Domain-specific exceptions"""

from typing import Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Request is missing fields or carries malformed values"""

    pass


class InvalidAmountError(ValidationError):
    """Purchase amount must be strictly positive"""

    def __init__(self, amount):
        self.amount = amount
        super().__init__(f"Purchase amount must be greater than zero, got {amount}")


class MissingPlanError(ValidationError):
    """Installment payment requested without a financing plan"""

    def __init__(self):
        super().__init__("Installment plan ID is required for installment payments")


class NotFoundError(DomainException):
    """Referenced entity does not exist (or is not visible to the caller)"""

    pass


class ProductNotFoundError(NotFoundError):
    """Product id is unknown or the product is no longer sold"""

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} not found")


class OrderNotFoundError(NotFoundError):
    """Order is unknown or belongs to another user"""

    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class CustomerNotFoundError(NotFoundError):
    """User has no customer profile (KYC never completed)"""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Customer profile for user {user_id} not found")


class InvalidPlanError(DomainException):
    """Financing plan is unknown, inactive, or has out-of-range terms"""

    def __init__(self, plan_id=None, reason: str = "not found or inactive"):
        self.plan_id = plan_id
        self.reason = reason
        super().__init__(f"Installment plan {plan_id} {reason}")


class InsufficientStockError(DomainException):
    """Requested quantity exceeds the product's available stock"""

    def __init__(self, product_id, product_name: Optional[str] = None, requested: int = 0, available: int = 0):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        label = product_name or str(product_id)
        super().__init__(
            f"Insufficient stock for product: {label} (requested {requested}, available {available})"
        )


class CreditLimitExceededError(DomainException):
    """Customer's remaining credit cannot cover the financed amount"""

    def __init__(self, user_id: str, required, remaining=None, reason: Optional[str] = None):
        self.user_id = user_id
        self.required = required
        self.remaining = remaining
        super().__init__(
            reason
            or f"Credit limit exceeded for user {user_id}: requires {required}, remaining {remaining}"
        )


class KycNotApprovedError(CreditLimitExceededError):
    """Installment buyer's KYC is still pending review or was rejected"""

    def __init__(self, user_id: str, kyc_status: str):
        self.kyc_status = kyc_status
        super().__init__(
            user_id,
            required=None,
            reason=f"KYC for user {user_id} is {kyc_status}; installments require approval",
        )


class TransactionFailure(DomainException):
    """Persistence failed mid-workflow; every write was rolled back"""

    pass
