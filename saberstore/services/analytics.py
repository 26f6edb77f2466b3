"""Storefront totals for the admin dashboard"""

from typing import Any, Dict

from sqlalchemy.orm import Session

from saberstore.domain.models import KycStatus
from saberstore.infrastructure.database.repositories import CreditRepository, OrderRepository


class AnalyticsService:
    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderRepository(db)
        self.customers = CreditRepository(db)

    def get_summary(self) -> Dict[str, Any]:
        total_orders, total_sales = self.orders.get_sales_totals()
        return {
            "total_customers": self.customers.count_profiles(),
            "total_orders": total_orders,
            "total_sales": total_sales,
            "pending_kyc": self.customers.count_profiles(KycStatus.PENDING.value),
        }
