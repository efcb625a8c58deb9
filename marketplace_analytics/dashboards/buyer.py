"""
Buyer Dashboard Assembler

Buyer-scoped order counts and spend. Buyers see whole orders, so no
attribution is involved.
"""

from datetime import datetime
from typing import List, Optional

import structlog

from marketplace_analytics.config import get_settings
from marketplace_analytics.config.settings import AnalyticsSettings
from marketplace_analytics.domain.money import format_currency
from marketplace_analytics.domain.read_models import BuyerDashboard, BuyerOrderSummary, SummaryCard
from marketplace_analytics.domain.records import OPEN_ORDER_STATUSES, OrderFilter, OrderStatus
from marketplace_analytics.engine.periods import utcnow
from marketplace_analytics.dashboards.sections import Section, assemble, gather_sections
from marketplace_analytics.repository.interfaces import DataStore

logger = structlog.get_logger(__name__)


async def buyer_orders_count(store: DataStore, buyer_id: str) -> int:
    return await store.count_where("orders", buyer_id=buyer_id)


async def buyer_total_spent(store: DataStore, buyer_id: str) -> int:
    """Sum of completed order totals, in cents."""
    orders = await store.orders_for_buyer(buyer_id, OrderFilter.of([OrderStatus.COMPLETED]))
    return sum(order.total_amount for order in orders)


async def buyer_recent_order_date(store: DataStore, buyer_id: str) -> Optional[datetime]:
    orders = await store.orders_for_buyer(buyer_id, OrderFilter(limit=1, newest_first=True))
    return orders[0].created_at if orders else None


async def buyer_pending_count(store: DataStore, buyer_id: str) -> int:
    return await store.count_where("orders", buyer_id=buyer_id, status=list(OPEN_ORDER_STATUSES))


async def buyer_recent_orders(store: DataStore, buyer_id: str, limit: int) -> List[BuyerOrderSummary]:
    orders = await store.orders_for_buyer(buyer_id, OrderFilter(limit=limit, newest_first=True))
    return [
        BuyerOrderSummary(
            id=order.id,
            status=order.status.value,
            total_amount=order.total_amount,
            created_at=order.created_at,
        )
        for order in orders
    ]


def format_date(moment: Optional[datetime]) -> str:
    if moment is None:
        return "N/A"
    return f"{moment.strftime('%b')} {moment.day}, {moment.year}"


def days_ago(moment: Optional[datetime], now: Optional[datetime] = None) -> str:
    if moment is None:
        return ""
    days = abs(((now or utcnow()) - moment).days)
    if days == 0:
        return "Today"
    if days == 1:
        return "1 day ago"
    return f"{days} days ago"


def build_buyer_cards(
    orders_count: int,
    total_spent: int,
    recent_order: Optional[datetime],
    pending_count: int,
    now: Optional[datetime] = None,
    currency_symbol: str = "$",
) -> List[SummaryCard]:
    return [
        SummaryCard(
            id="orders-placed",
            title="Orders placed",
            value=str(orders_count),
            change_label="",
            trend="up",
        ),
        SummaryCard(
            id="total-spent",
            title="Total spent",
            value=format_currency(total_spent, currency_symbol),
            change_label="",
            trend="up",
            helper_text="Completed orders",
        ),
        SummaryCard(
            id="recent-order",
            title="Recent order",
            value=format_date(recent_order),
            change_label=days_ago(recent_order, now),
            trend="up",
        ),
        SummaryCard(
            id="pending-orders",
            title="Pending orders",
            value=str(pending_count),
            change_label=f"{pending_count} active" if pending_count > 0 else "",
            trend="up",
        ),
    ]


def empty_buyer_dashboard(currency_symbol: str = "$") -> BuyerDashboard:
    return BuyerDashboard(summary_cards=build_buyer_cards(0, 0, None, 0, currency_symbol=currency_symbol))


async def build_buyer_dashboard(
    store: DataStore,
    buyer_id: str,
    now: Optional[datetime] = None,
    analytics: Optional[AnalyticsSettings] = None,
) -> BuyerDashboard:
    """Assemble the buyer dashboard from five independent fetches."""
    analytics = analytics or get_settings().analytics
    symbol = analytics.currency_symbol

    async def build() -> BuyerDashboard:
        orders_count, total_spent, recent_order, pending_count, recent_orders = await gather_sections(
            "buyer",
            [
                Section("orders_count", lambda: buyer_orders_count(store, buyer_id), lambda: 0),
                Section("total_spent", lambda: buyer_total_spent(store, buyer_id), lambda: 0),
                Section("recent_order_date", lambda: buyer_recent_order_date(store, buyer_id), lambda: None),
                Section("pending_count", lambda: buyer_pending_count(store, buyer_id), lambda: 0),
                Section(
                    "recent_orders",
                    lambda: buyer_recent_orders(store, buyer_id, analytics.recent_orders_limit),
                    list,
                ),
            ],
        )
        logger.info("Buyer dashboard assembled", buyer_id=buyer_id, orders=orders_count)
        return BuyerDashboard(
            summary_cards=build_buyer_cards(orders_count, total_spent, recent_order, pending_count, now, symbol),
            recent_orders=recent_orders,
        )

    return await assemble("buyer", build, lambda: empty_buyer_dashboard(symbol))
