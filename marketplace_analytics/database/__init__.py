"""
Read-side schema and engine lifecycle.
"""
from .connection import check_database_health, close_database, get_session_factory, init_database
from .models import Base, Order, OrderItem, Product, Store, User

__all__ = [
    "Base",
    "Order",
    "OrderItem",
    "Product",
    "Store",
    "User",
    "init_database",
    "close_database",
    "get_session_factory",
    "check_database_health",
]
