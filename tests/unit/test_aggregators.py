"""
Unit Tests - Aggregators
"""
from datetime import date, datetime

import pytest

from marketplace_analytics.domain.records import OrderStatus
from marketplace_analytics.engine import aggregators
from marketplace_analytics.engine.attribution import AttributedOrder
from marketplace_analytics.engine.periods import day_buckets, month_buckets

from conftest import NOW, make_item, make_order, make_product


class TestGrowth:
    """Tests for growth percentage edge cases"""

    def test_previous_zero_with_current_revenue(self):
        assert aggregators.growth_percentage(5000, 0) == 100.0

    def test_both_zero(self):
        assert aggregators.growth_percentage(0, 0) == 0.0

    def test_decline(self):
        assert aggregators.growth_percentage(8000, 10000) == -20.0

    def test_rounded_to_two_places(self):
        assert aggregators.growth_percentage(1, 3) == -66.67

    def test_change_label(self):
        assert aggregators.change_label(11250, 10000) == "+12.5%"
        assert aggregators.change_label(100, 0) == "+100%"
        assert aggregators.change_label(0, 0) == "0%"
        assert aggregators.change_label(5000, 10000) == "-50.0%"


class TestRevenueOverview:

    def test_totals_and_average(self):
        """Test overview sums seller revenue and rounds the average"""
        orders = [
            AttributedOrder(make_order("o1", 5000), 5000),
            AttributedOrder(make_order("o2", 3001), 3001),
        ]

        overview = aggregators.revenue_overview(orders, previous_revenue=10000, period="30d")

        assert overview.total_revenue == 8001
        assert overview.total_orders == 2
        assert overview.average_order_value == 4001
        assert overview.growth_percentage == -19.99
        assert overview.period == "30d"

    def test_empty(self):
        overview = aggregators.revenue_overview([], previous_revenue=0, period="7d")

        assert overview.total_revenue == 0
        assert overview.average_order_value == 0
        assert overview.growth_percentage == 0.0


class TestRevenueTrend:
    """Tests for bucketed revenue trends"""

    def test_six_month_trend_has_six_points(self):
        """Test a six month trend is zero filled to six buckets"""
        buckets = month_buckets(date(2026, 10, 19), 6)

        trend = aggregators.revenue_trend([], buckets)

        assert [point.bucket for point in trend] == [
            "2026-05", "2026-06", "2026-07", "2026-08", "2026-09", "2026-10",
        ]
        assert all(point.revenue == 0 for point in trend)

    def test_points_land_in_their_bucket(self):
        buckets = day_buckets(date(2026, 10, 19), 7)
        points = [
            (datetime(2026, 10, 13, 0, 0), 100),
            (datetime(2026, 10, 19, 23, 59), 200),
            (datetime(2026, 10, 19, 1, 0), 50),
            (datetime(2026, 10, 12, 23, 59), 999),
            (datetime(2026, 10, 20, 0, 0), 999),
        ]

        trend = aggregators.revenue_trend(points, buckets)

        assert len(trend) == 7
        assert trend[0].revenue == 100
        assert trend[-1].revenue == 250
        assert sum(point.revenue for point in trend) == 350

    def test_labels(self):
        trend = aggregators.revenue_trend([], day_buckets(date(2026, 1, 2), 2))

        assert [point.label for point in trend] == ["Jan 01", "Jan 02"]


class TestDistributions:

    def test_category_product_counts(self):
        """Test product counts per category, largest first, missing as Other"""
        products = [
            make_product("p1", category="Home"),
            make_product("p2", category="Toys"),
            make_product("p3", category="Home"),
            make_product("p4", category=None),
            make_product("p5", category="  "),
        ]

        entries = aggregators.category_product_counts(products)

        assert [(e.name, e.value) for e in entries] == [("Home", 2), ("Other", 2), ("Toys", 1)]

    def test_category_product_counts_capped(self):
        products = [make_product(f"p{i}", category=f"cat-{i}") for i in range(15)]

        assert len(aggregators.category_product_counts(products, cap=10)) == 10

    def test_category_revenue(self):
        """Test category revenue with distinct order counts"""
        products = {
            "p1": make_product("p1", category="Home"),
            "p2": make_product("p2", category="Books"),
        }
        items = [
            make_item("o1", "p1", 1000, 2),
            make_item("o1", "p2", 500),
            make_item("o2", "p1", 1000),
            make_item("o3", "missing", 700),
        ]

        entries = aggregators.category_revenue(items, products)

        assert [(e.name, e.value, e.order_count) for e in entries] == [
            ("Home", 3000, 2),
            ("Other", 700, 1),
            ("Books", 500, 1),
        ]

    def test_category_revenue_ties_keep_first_seen(self):
        products = {"p1": make_product("p1", category="B"), "p2": make_product("p2", category="A")}
        items = [make_item("o1", "p1", 500), make_item("o2", "p2", 500)]

        assert [e.name for e in aggregators.category_revenue(items, products)] == ["B", "A"]

    def test_order_status_distribution_labels(self):
        statuses = [
            OrderStatus.COMPLETED,
            OrderStatus.PENDING,
            OrderStatus.COMPLETED,
            OrderStatus.REFUNDED,
        ]

        entries = aggregators.order_status_distribution(statuses)

        assert [(e.status, e.count) for e in entries] == [("Delivered", 2), ("Pending", 1), ("Refunded", 1)]

    def test_order_status_counts_from_precomputed_totals(self):
        entries = aggregators.order_status_counts(
            {
                OrderStatus.PENDING: 4,
                OrderStatus.PROCESSING: 0,
                OrderStatus.COMPLETED: 9,
                OrderStatus.CANCELLED: 4,
            }
        )

        assert [(e.status, e.count) for e in entries] == [("Delivered", 9), ("Pending", 4), ("Cancelled", 4)]

    def test_order_status_distribution_accepts_raw_values(self):
        entries = aggregators.order_status_distribution(["processing"])

        assert entries[0].status == "Processing"


class TestRankings:
    """Tests for top-N rankings"""

    def test_top_products(self):
        products = {"p1": make_product("p1", name="Lamp"), "p2": make_product("p2", name="Mug")}
        items = [
            make_item("o1", "p1", 3000),
            make_item("o2", "p2", 1200, 3),
            make_item("o3", "p1", 3000, 2),
        ]

        top = aggregators.top_products(items, products)

        assert [(t.name, t.revenue, t.quantity, t.orders) for t in top] == [
            ("Lamp", 9000, 3, 2),
            ("Mug", 3600, 3, 1),
        ]
        assert top[0].growth is None

    def test_top_n_cap_with_stable_ties(self):
        """Test rankings truncate to N and keep input order for equal revenue"""
        products = {f"p{i}": make_product(f"p{i}") for i in range(12)}
        items = [make_item(f"o{i}", f"p{i}", 1000) for i in range(12)]

        top = aggregators.top_products(items, products, limit=10)

        assert len(top) == 10
        assert [t.id for t in top] == [f"p{i}" for i in range(10)]

    def test_unknown_product_name(self):
        top = aggregators.top_products([make_item("o1", "ghost", 100)], {})

        assert top[0].name == aggregators.UNKNOWN_PRODUCT_NAME

    def test_top_stores_with_growth(self):
        """Test store growth is computed from the previous window"""
        products = {
            "pa": make_product("pa", store_id="s-a"),
            "pb": make_product("pb", store_id="s-b"),
        }
        items = [make_item("o1", "pa", 3000), make_item("o1", "pb", 5000), make_item("o2", "pa", 8000)]
        previous_items = [make_item("o0", "pa", 10000)]

        top = aggregators.top_stores(
            items,
            products,
            {"s-a": "Alpha", "s-b": "Beta"},
            previous_items=previous_items,
        )

        assert [(t.name, t.revenue, t.orders, t.growth) for t in top] == [
            ("Alpha", 11000, 2, 10.0),
            ("Beta", 5000, 1, 100.0),
        ]

    def test_empty_rankings(self):
        assert aggregators.top_products([], {}) == []
        assert aggregators.rank_entities([("e", "o", 1, 1)], {}, limit=0) == []


class TestAlerts:

    @pytest.mark.parametrize(
        "stock, severity",
        [(0, "Out of Stock"), (1, "Critical"), (2, "Critical"), (3, "Low"), (4, "Low"), (5, "Running Low"), (9, "Running Low")],
    )
    def test_stock_severity(self, stock, severity):
        assert aggregators.stock_severity(stock) == severity

    def test_low_stock_alerts_keep_order(self):
        products = [
            make_product("p0", stock=0, category="Home"),
            make_product("p3", stock=3, category=None),
            make_product("p9", stock=9, category="Toys"),
        ]

        alerts = aggregators.low_stock_alerts(products)

        assert [a.stock for a in alerts] == [0, 3, 9]
        assert alerts[1].category == "Uncategorized"

    def test_pending_order_summaries(self):
        """Test only open orders are listed, newest first, with the seller share"""
        orders = [
            AttributedOrder(make_order("old", 1000, OrderStatus.PENDING, datetime(2026, 10, 1)), 1000),
            AttributedOrder(make_order("done", 1000, OrderStatus.COMPLETED, NOW), 1000),
            AttributedOrder(make_order("new", 8000, OrderStatus.PROCESSING, NOW), 3000),
        ]

        summaries = aggregators.pending_order_summaries(orders, limit=10)

        assert [s.id for s in summaries] == ["new", "old"]
        assert summaries[0].is_partial
        assert summaries[0].seller_amount == 3000
        assert summaries[0].amount == 8000

    def test_pending_order_summaries_limit(self):
        orders = [
            AttributedOrder(make_order(f"o{i}", 100, OrderStatus.PENDING, datetime(2026, 10, i + 1)), 100)
            for i in range(12)
        ]

        assert len(aggregators.pending_order_summaries(orders, limit=10)) == 10
