"""
Read-Model Contracts

Shapes handed to the presentation layer. Every model has a zero value so a
failed or empty section still renders. Monetary fields are integer cents.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


Trend = Literal["up", "down"]


class SummaryCard(BaseModel):
    """Headline metric rendered uniformly across dashboards"""
    id: str
    title: str
    value: str
    change_label: str = ""
    trend: Trend = "up"
    helper_text: Optional[str] = None


class RevenueOverview(BaseModel):
    """Revenue totals for a window, with growth against the preceding window"""
    total_revenue: int = 0
    total_orders: int = 0
    average_order_value: int = 0
    growth_percentage: float = 0.0
    period: str = "30d"


class RevenueTrendPoint(BaseModel):
    bucket: str
    label: str
    revenue: int = 0


class CategoryDistributionEntry(BaseModel):
    name: str
    value: int
    order_count: Optional[int] = None


class OrderStatusEntry(BaseModel):
    status: str
    count: int


class TopEntity(BaseModel):
    """Ranked product or store"""
    id: str
    name: str
    revenue: int = 0
    orders: int = 0
    quantity: Optional[int] = None
    growth: Optional[float] = None


class LowStockAlert(BaseModel):
    product_id: str
    name: str
    stock: int
    category: str
    severity: str


class PendingOrderSummary(BaseModel):
    """
    Open order touching the seller.

    ``amount`` is the buyer's full order total; ``seller_amount`` is the only
    revenue figure disclosed for the seller. ``is_partial`` marks orders
    shared with other sellers.
    """
    id: str
    status: str
    amount: int
    seller_amount: int
    is_partial: bool = False
    created_at: datetime


class StoreLocation(BaseModel):
    id: str
    name: str
    city: str
    state: Optional[str] = None
    lat: float
    lng: float


class BuyerOrderSummary(BaseModel):
    id: str
    status: str
    total_amount: int
    created_at: datetime


class SellerOrderLine(BaseModel):
    id: str
    product_id: str
    product_name: str
    quantity: int
    unit_price: int
    total: int


class SellerOrder(BaseModel):
    id: str
    buyer_id: str
    buyer_name: Optional[str] = None
    buyer_email: Optional[str] = None
    total_amount: int
    seller_amount: int
    status: str
    is_partial: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: List[SellerOrderLine] = Field(default_factory=list)


# =============================================================================
# DASHBOARDS
# =============================================================================

class BuyerDashboard(BaseModel):
    summary_cards: List[SummaryCard] = Field(default_factory=list)
    recent_orders: List[BuyerOrderSummary] = Field(default_factory=list)


class SellerDashboard(BaseModel):
    summary_cards: List[SummaryCard] = Field(default_factory=list)
    low_stock_products: List[LowStockAlert] = Field(default_factory=list)
    pending_orders: List[PendingOrderSummary] = Field(default_factory=list)


class AdminDashboard(BaseModel):
    summary_cards: List[SummaryCard] = Field(default_factory=list)
    revenue_trend: List[RevenueTrendPoint] = Field(default_factory=list)
    category_distribution: List[CategoryDistributionEntry] = Field(default_factory=list)
    order_status_distribution: List[OrderStatusEntry] = Field(default_factory=list)
    top_stores: List[TopEntity] = Field(default_factory=list)
    store_locations: List[StoreLocation] = Field(default_factory=list)


class SellerRevenueReport(BaseModel):
    """Seller revenue page, computed from pure orders only"""
    overview: RevenueOverview = Field(default_factory=RevenueOverview)
    trend: List[RevenueTrendPoint] = Field(default_factory=list)
    by_category: List[CategoryDistributionEntry] = Field(default_factory=list)
    top_products: List[TopEntity] = Field(default_factory=list)
    status_breakdown: List[OrderStatusEntry] = Field(default_factory=list)
