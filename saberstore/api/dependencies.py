"""Dependency injection for FastAPI endpoints"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from saberstore.config import settings
from saberstore.infrastructure.clients.inventory_sync import InventorySyncClient
from saberstore.infrastructure.database.session import get_db
from saberstore.services.analytics import AnalyticsService
from saberstore.services.credit import CreditService
from saberstore.services.installments import InstallmentService
from saberstore.services.orders import OrderService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_current_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-ID")) -> str:
    """Caller identity forwarded by the authenticating gateway"""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return x_user_id


def require_admin(
    user_id: str = Depends(get_current_user_id),
    x_user_role: Optional[str] = Header(None, alias="X-User-Role"),
) -> str:
    """Admin-only routes; returns the admin's user id"""
    if x_user_role != settings.admin_role:
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    return user_id


def get_inventory_sync_client() -> InventorySyncClient:
    """Provide inventory sync webhook client instance"""
    return InventorySyncClient()


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_installment_service(db: Session = Depends(get_db)) -> InstallmentService:
    return InstallmentService(db)


def get_credit_service(db: Session = Depends(get_db)) -> CreditService:
    return CreditService(db)


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)
