"""
Integration Tests - HTTP API
"""
import httpx
import pytest

from marketplace_analytics.serving.api.dependencies import get_data_store
from marketplace_analytics.serving.api.main import DATA_STORE_UNAVAILABLE_MESSAGE, create_app

from conftest import FailingDataStore

pytestmark = pytest.mark.integration


@pytest.fixture
def app(seeded_store):
    application = create_app()
    application.dependency_overrides[get_data_store] = lambda: seeded_store
    return application


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


class TestDashboardRoutes:

    async def test_seller_dashboard(self, client):
        response = await client.get("/api/v1/dashboards/seller/seller-a")

        assert response.status_code == 200
        body = response.json()
        assert [card["id"] for card in body["summary_cards"]] == [
            "revenue-7d",
            "orders-fulfilled",
            "products-listed",
            "low-stock-alerts",
        ]
        assert [p["stock"] for p in body["low_stock_products"]] == [0, 3, 9]
        assert "X-Request-ID" in response.headers

    async def test_buyer_dashboard(self, client):
        response = await client.get("/api/v1/dashboards/buyer/buyer-1")

        assert response.status_code == 200
        assert len(response.json()["summary_cards"]) == 4

    async def test_admin_dashboard(self, client):
        response = await client.get("/api/v1/dashboards/admin")

        assert response.status_code == 200
        body = response.json()
        assert len(body["revenue_trend"]) == 6
        assert {loc["city"] for loc in body["store_locations"]} == {"Austin", "Seattle"}

    async def test_failing_store_still_answers(self, app, client):
        """Test a broken data store yields a zero-valued dashboard, not an error"""
        app.dependency_overrides[get_data_store] = lambda: FailingDataStore()

        response = await client.get("/api/v1/dashboards/seller/seller-a")

        assert response.status_code == 200
        assert response.json()["pending_orders"] == []


class TestSellerRoutes:

    async def test_revenue_report(self, client):
        response = await client.get("/api/v1/sellers/seller-a/revenue", params={"period": "90d"})

        assert response.status_code == 200
        body = response.json()
        assert body["overview"]["period"] == "90d"
        assert len(body["trend"]) == 90

    async def test_invalid_period(self, client):
        response = await client.get("/api/v1/sellers/seller-a/revenue", params={"period": "2w"})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_filter"

    async def test_foreign_store(self, client):
        response = await client.get("/api/v1/sellers/seller-a/revenue", params={"store_id": "store-b1"})

        assert response.status_code == 403
        assert response.json()["error"] == "scope_access_denied"

    async def test_order_list(self, client):
        response = await client.get("/api/v1/sellers/seller-a/orders", params={"status": "all"})

        assert response.status_code == 200
        orders = response.json()
        assert len(orders) == 7
        shared = next(o for o in orders if o["id"] == "ord-shared")
        assert shared["is_partial"] is True
        assert shared["seller_amount"] == 3000

    async def test_invalid_status(self, client):
        response = await client.get("/api/v1/sellers/seller-a/orders", params={"status": "shipped"})

        assert response.status_code == 400

    async def test_order_detail(self, client):
        response = await client.get("/api/v1/sellers/seller-b/orders/ord-shared")

        assert response.status_code == 200
        assert [line["product_id"] for line in response.json()["items"]] == ["prod-b1"]

    async def test_order_detail_not_found(self, client):
        response = await client.get("/api/v1/sellers/seller-a/orders/ord-b-only")

        assert response.status_code == 404
        assert response.json()["details"]["order_id"] == "ord-b-only"

    async def test_order_detail_store_unavailable(self, app, client):
        app.dependency_overrides[get_data_store] = lambda: FailingDataStore()

        response = await client.get("/api/v1/sellers/seller-a/orders/ord-shared")

        assert response.status_code == 503
        body = response.json()
        assert body["error"] == "data_store_unavailable"
        assert body["message"] == DATA_STORE_UNAVAILABLE_MESSAGE
        assert "connection refused" not in response.text
        assert "list_owned_stores" not in response.text


class TestHealthRoutes:

    async def test_liveness(self, client):
        response = await client.get("/api/v1/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    async def test_health_degraded_without_database(self, client):
        """Test the engine is never created under the test client, so health degrades"""
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["checks"]["database"]["status"] == "unhealthy"

    async def test_readiness_without_database(self, client):
        response = await client.get("/api/v1/health/ready")

        assert response.status_code == 503
        assert response.json()["reason"] == "database_unavailable"

    async def test_request_id_echoed(self, client):
        response = await client.get("/api/v1/health/live", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"
        assert response.headers["X-Response-Time"].endswith("ms")
