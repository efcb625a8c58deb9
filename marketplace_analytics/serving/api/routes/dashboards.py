"""
Dashboard API Endpoints

Role dashboards. Each one always answers 200; failed sections come back
zero-valued.
"""

from fastapi import APIRouter, Depends
import structlog

from marketplace_analytics.dashboards import (
    build_admin_dashboard,
    build_buyer_dashboard,
    build_seller_dashboard,
)
from marketplace_analytics.domain.read_models import AdminDashboard, BuyerDashboard, SellerDashboard
from marketplace_analytics.repository.interfaces import DataStore
from marketplace_analytics.serving.api.dependencies import get_data_store

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("/buyer/{buyer_id}", response_model=BuyerDashboard)
async def get_buyer_dashboard(
    buyer_id: str,
    store: DataStore = Depends(get_data_store),
) -> BuyerDashboard:
    logger.debug("get_buyer_dashboard called", buyer_id=buyer_id)
    return await build_buyer_dashboard(store, buyer_id)


@router.get("/seller/{seller_id}", response_model=SellerDashboard)
async def get_seller_dashboard(
    seller_id: str,
    store: DataStore = Depends(get_data_store),
) -> SellerDashboard:
    """Headline cards, low stock alerts and open orders across the seller's stores."""
    logger.debug("get_seller_dashboard called", seller_id=seller_id)
    return await build_seller_dashboard(store, seller_id)


@router.get("/admin", response_model=AdminDashboard)
async def get_admin_dashboard(store: DataStore = Depends(get_data_store)) -> AdminDashboard:
    logger.debug("get_admin_dashboard called")
    return await build_admin_dashboard(store)
