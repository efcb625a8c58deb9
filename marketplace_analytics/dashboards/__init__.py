"""
Dashboard Assemblers
"""
from .admin import build_admin_dashboard
from .buyer import build_buyer_dashboard
from .orders import get_seller_order, list_seller_orders
from .revenue import build_seller_revenue_report
from .seller import build_seller_dashboard

__all__ = [
    "build_admin_dashboard",
    "build_buyer_dashboard",
    "build_seller_dashboard",
    "build_seller_revenue_report",
    "list_seller_orders",
    "get_seller_order",
]
