"""Service layer helpers for the API."""

from .order_service import OrderService
from .promoter import PendingOrderPromoter

__all__ = ["OrderService", "PendingOrderPromoter"]
