"""
Domain Module
"""
from .records import (
    OrderFilter,
    OrderItemRecord,
    OrderRecord,
    OrderStatus,
    ProductRecord,
    StoreRecord,
    UserRecord,
    UserRole,
    VerificationStatus,
)
from .money import format_currency, to_cents

__all__ = [
    "OrderFilter",
    "OrderItemRecord",
    "OrderRecord",
    "OrderStatus",
    "ProductRecord",
    "StoreRecord",
    "UserRecord",
    "UserRole",
    "VerificationStatus",
    "format_currency",
    "to_cents",
]
