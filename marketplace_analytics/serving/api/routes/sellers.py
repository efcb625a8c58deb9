"""
Seller API Endpoints

Revenue report and order list for one seller. Unsupported periods or
status filters are rejected with 400, stores the seller does not own with
403.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
import structlog

from marketplace_analytics.dashboards import (
    build_seller_revenue_report,
    get_seller_order,
    list_seller_orders,
)
from marketplace_analytics.domain.read_models import SellerOrder, SellerRevenueReport
from marketplace_analytics.repository.interfaces import DataStore
from marketplace_analytics.serving.api.dependencies import get_data_store

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("/{seller_id}/revenue", response_model=SellerRevenueReport)
async def get_seller_revenue(
    seller_id: str,
    period: str = Query("30d", description="One of 7d, 30d, 90d, 1y"),
    store_id: Optional[str] = Query(None, description="Limit the report to one owned store"),
    store: DataStore = Depends(get_data_store),
) -> SellerRevenueReport:
    """
    Revenue overview, trend, category split, top products and status
    breakdown for a period, computed from orders entirely owned by the seller.
    """
    logger.debug("get_seller_revenue called", seller_id=seller_id, period=period, store_id=store_id)
    return await build_seller_revenue_report(store, seller_id, period=period, store_id=store_id)


@router.get("/{seller_id}/orders", response_model=List[SellerOrder])
async def get_seller_orders(
    seller_id: str,
    status: str = Query("all", description="Order status or 'all'"),
    store_id: Optional[str] = Query(None),
    store: DataStore = Depends(get_data_store),
) -> List[SellerOrder]:
    """Orders touching the seller's products, shared orders flagged as partial."""
    logger.debug("get_seller_orders called", seller_id=seller_id, status=status, store_id=store_id)
    return await list_seller_orders(store, seller_id, status=status, store_id=store_id)


@router.get("/{seller_id}/orders/{order_id}", response_model=SellerOrder)
async def get_seller_order_detail(
    seller_id: str,
    order_id: str,
    store_id: Optional[str] = Query(None),
    store: DataStore = Depends(get_data_store),
) -> SellerOrder:
    logger.debug("get_seller_order_detail called", seller_id=seller_id, order_id=order_id)
    return await get_seller_order(store, seller_id, order_id, store_id=store_id)
