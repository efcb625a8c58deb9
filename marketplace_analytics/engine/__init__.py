"""
Revenue Attribution and Aggregation Engine
"""
from .attribution import (
    AnomalyKind,
    AttributedOrder,
    AttributionAnomaly,
    AttributionResult,
    attribute_orders,
    seller_revenue_by_order,
)
from .periods import RevenuePeriod, parse_period
from .pipeline import SellerScope, SellerSnapshot, resolve_scope, load_seller_items

__all__ = [
    "AnomalyKind",
    "AttributedOrder",
    "AttributionAnomaly",
    "AttributionResult",
    "attribute_orders",
    "seller_revenue_by_order",
    "RevenuePeriod",
    "parse_period",
    "SellerScope",
    "SellerSnapshot",
    "resolve_scope",
    "load_seller_items",
]
