"""
Admin Dashboard Assembler

Platform-scoped read-model. Platform revenue counts whole completed orders;
store rankings split order items by the store owning each product, so
multi-seller orders are credited to each store for its own lines only.
"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple

import structlog

from marketplace_analytics.config import get_settings
from marketplace_analytics.config.settings import AnalyticsSettings
from marketplace_analytics.domain.money import format_currency
from marketplace_analytics.domain.read_models import (
    AdminDashboard,
    CategoryDistributionEntry,
    OrderStatusEntry,
    RevenueTrendPoint,
    StoreLocation,
    SummaryCard,
    TopEntity,
)
from marketplace_analytics.domain.records import OrderFilter, OrderStatus, VerificationStatus
from marketplace_analytics.engine import aggregators
from marketplace_analytics.engine.locations import store_locations
from marketplace_analytics.engine.periods import month_buckets, preceding_days, trailing_days, utcnow, window_of
from marketplace_analytics.engine.pipeline import load_platform_window
from marketplace_analytics.dashboards.sections import Section, assemble, gather_or_cancel, gather_sections
from marketplace_analytics.repository.interfaces import DataStore

logger = structlog.get_logger(__name__)


async def platform_revenue(store: DataStore, days: int, now: Optional[datetime] = None) -> Tuple[int, int]:
    """Completed order revenue over the last ``days`` days and the window before."""
    current = trailing_days(days, now)
    previous = preceding_days(current, days)
    orders = await store.list_orders(
        OrderFilter.of([OrderStatus.COMPLETED], date_from=previous.start, date_to=current.end)
    )
    current_revenue = sum(order.total_amount for order in orders if current.contains(order.created_at))
    previous_revenue = sum(order.total_amount for order in orders if previous.contains(order.created_at))
    return current_revenue, previous_revenue


async def platform_revenue_trend(
    store: DataStore,
    months: int,
    now: Optional[datetime] = None,
) -> List[RevenueTrendPoint]:
    buckets = month_buckets((now or utcnow()).date(), months)
    window = window_of(buckets)
    orders = await store.list_orders(
        OrderFilter.of([OrderStatus.COMPLETED], date_from=window.start, date_to=window.end)
    )
    return aggregators.revenue_trend(((order.created_at, order.total_amount) for order in orders), buckets)


async def platform_category_distribution(store: DataStore, cap: int) -> List[CategoryDistributionEntry]:
    stores = await store.list_stores()
    if not stores:
        return []
    products = await store.list_products([s.id for s in stores])
    return aggregators.category_product_counts(products, cap=cap)


async def platform_status_distribution(store: DataStore) -> List[OrderStatusEntry]:
    """One count query per status, run concurrently; no order rows are loaded."""
    statuses = list(OrderStatus)
    counts = await gather_or_cancel(*(store.count_where("orders", status=status) for status in statuses))
    return aggregators.order_status_counts(dict(zip(statuses, counts)))


async def platform_top_stores(
    store: DataStore,
    days: int,
    limit: int,
    now: Optional[datetime] = None,
) -> List[TopEntity]:
    """Stores ranked by completed-order revenue, growth against the previous window."""
    current = trailing_days(days, now)
    previous = preceding_days(current, days)
    current_snapshot = await load_platform_window(
        store, OrderFilter.of([OrderStatus.COMPLETED], date_from=current.start, date_to=current.end)
    )
    if not current_snapshot.items:
        return []
    previous_snapshot = await load_platform_window(
        store, OrderFilter.of([OrderStatus.COMPLETED], date_from=previous.start, date_to=previous.end)
    )
    names: Dict[str, str] = {s.id: s.name for s in await store.list_stores()}
    return aggregators.top_stores(
        current_snapshot.items,
        current_snapshot.products,
        names,
        limit=limit,
        previous_items=previous_snapshot.items,
        previous_products=previous_snapshot.products,
    )


async def platform_store_locations(store: DataStore) -> List[StoreLocation]:
    return store_locations(await store.list_stores(VerificationStatus.VERIFIED))


def build_admin_cards(
    revenue: Tuple[int, int],
    active_stores: int,
    pending_approvals: int,
    total_users: int,
    window_days: int,
    currency_symbol: str = "$",
) -> List[SummaryCard]:
    current_revenue, previous_revenue = revenue
    return [
        SummaryCard(
            id="total-revenue",
            title="Total Revenue",
            value=format_currency(current_revenue, currency_symbol),
            change_label=f"{aggregators.change_label(current_revenue, previous_revenue)} vs previous {window_days} days",
            trend=aggregators.trend_of(current_revenue, previous_revenue),
            helper_text="Platform-wide revenue",
        ),
        SummaryCard(
            id="active-stores",
            title="Active Stores",
            value=f"{active_stores:,}",
            trend="up",
            helper_text="Verified stores",
        ),
        SummaryCard(
            id="pending-approvals",
            title="Pending Approvals",
            value=f"{pending_approvals:,}",
            change_label=f"{pending_approvals} awaiting review" if pending_approvals else "",
            trend="down" if pending_approvals else "up",
            helper_text="Stores awaiting verification",
        ),
        SummaryCard(
            id="total-users",
            title="Total Users",
            value=f"{total_users:,}",
            trend="up",
            helper_text="Buyers and sellers",
        ),
    ]


def empty_admin_dashboard(window_days: int = 30, currency_symbol: str = "$") -> AdminDashboard:
    return AdminDashboard(summary_cards=build_admin_cards((0, 0), 0, 0, 0, window_days, currency_symbol))


async def build_admin_dashboard(
    store: DataStore,
    now: Optional[datetime] = None,
    analytics: Optional[AnalyticsSettings] = None,
) -> AdminDashboard:
    """Assemble the platform dashboard; sections degrade independently."""
    analytics = analytics or get_settings().analytics
    window_days = analytics.admin_revenue_window_days
    symbol = analytics.currency_symbol

    async def build() -> AdminDashboard:
        (
            revenue,
            active_stores,
            pending_approvals,
            total_users,
            trend,
            categories,
            statuses,
            top,
            locations,
        ) = await gather_sections(
            "admin",
            [
                Section("revenue", lambda: platform_revenue(store, window_days, now), lambda: (0, 0)),
                Section(
                    "active_stores",
                    lambda: store.count_where("stores", verification_status=VerificationStatus.VERIFIED),
                    lambda: 0,
                ),
                Section(
                    "pending_approvals",
                    lambda: store.count_where("stores", verification_status=VerificationStatus.PENDING),
                    lambda: 0,
                ),
                Section("total_users", lambda: store.count_where("users"), lambda: 0),
                Section(
                    "revenue_trend",
                    lambda: platform_revenue_trend(store, analytics.admin_trend_months, now),
                    list,
                ),
                Section(
                    "category_distribution",
                    lambda: platform_category_distribution(store, analytics.category_cap),
                    list,
                ),
                Section("order_status_distribution", lambda: platform_status_distribution(store), list),
                Section(
                    "top_stores",
                    lambda: platform_top_stores(store, window_days, analytics.top_n, now),
                    list,
                ),
                Section("store_locations", lambda: platform_store_locations(store), list),
            ],
        )
        logger.info(
            "Admin dashboard assembled",
            active_stores=active_stores,
            top_stores=len(top),
            trend_points=len(trend),
        )
        return AdminDashboard(
            summary_cards=build_admin_cards(revenue, active_stores, pending_approvals, total_users, window_days, symbol),
            revenue_trend=trend,
            category_distribution=categories,
            order_status_distribution=statuses,
            top_stores=top,
            store_locations=locations,
        )

    return await assemble("admin", build, lambda: empty_admin_dashboard(window_days, symbol))
