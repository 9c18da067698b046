"""
API Tests - Reports and Analyses
"""
import pytest
from fastapi.testclient import TestClient

from sales_analytics.config import get_settings
from sales_analytics.serving.api import create_app


@pytest.fixture
def client(sample_snapshot):
    with TestClient(create_app(snapshot=sample_snapshot)) as client:
        yield client


class TestHealth:
    """Tests for health endpoints"""

    def test_health(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"]["snapshot"]["rows"]["sales"] == 7

    def test_ready(self, client):
        assert client.get("/api/v1/health/ready").status_code == 200
        assert client.get("/api/v1/health/live").json() == {"status": "alive"}

    def test_missing_snapshot(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATA_GOLD_PATH", str(tmp_path))
        get_settings.cache_clear()
        try:
            with TestClient(create_app()) as client:
                assert client.get("/api/v1/health/ready").status_code == 503
                assert client.get("/api/v1/health").json()["status"] == "degraded"
                assert client.get("/api/v1/reports/products").status_code == 503
        finally:
            get_settings.cache_clear()


class TestReportRoutes:
    """Tests for report endpoints"""

    def test_product_report(self, client):
        response = client.get("/api/v1/reports/products", params={"as_of": "2025-01-01"})

        assert response.status_code == 200
        body = response.json()
        assert body["as_of"] == "2025-01-01"
        assert body["total"] == 4
        road = body["items"][0]
        assert road["product_name"] == "Road-150"
        assert road["recency_in_months"] == 22
        assert road["last_sale_date"] == "2023-03-10"

    def test_product_report_filters(self, client):
        response = client.get(
            "/api/v1/reports/products",
            params={"category": "Bikes", "limit": 1, "as_of": "2025-01-01"},
        )

        body = response.json()
        assert body["total"] == 2
        assert len(body["items"]) == 1

    def test_single_product(self, client):
        response = client.get("/api/v1/reports/products/3", params={"as_of": "2025-01-01"})

        assert response.status_code == 200
        assert response.json()["total_customers"] == 2

    def test_unknown_product(self, client):
        assert client.get("/api/v1/reports/products/4").status_code == 404

    def test_customer_report_segment_filter(self, client):
        response = client.get("/api/v1/reports/customers", params={"segment": "VIP", "as_of": "2025-01-01"})

        body = response.json()
        assert body["total"] == 1
        assert body["items"][0]["customer_name"] == "Jon Yang"

    def test_single_customer(self, client):
        response = client.get("/api/v1/reports/customers/11", params={"as_of": "2025-01-01"})

        assert response.json()["age_group"] == "Under 20"


class TestAnalysisRoutes:
    """Tests for analysis endpoints"""

    def test_top_products(self, client):
        response = client.get("/api/v1/analysis/ranking/products", params={"top_n": 2})

        assert [p["product_name"] for p in response.json()] == ["Road-150", "Mountain-200"]

    def test_bottom_products(self, client):
        response = client.get("/api/v1/analysis/ranking/products", params={"order": "bottom", "top_n": 1})

        assert response.json()[0]["product_name"] == "Sport-100 Helmet"

    def test_customer_ranking(self, client):
        response = client.get("/api/v1/analysis/ranking/customers", params={"by": "fewest_orders", "top_n": 1})

        body = response.json()
        assert len(body) == 3
        assert all(c["total_orders"] == 2 for c in body)

    def test_trend(self, client):
        response = client.get("/api/v1/analysis/trend", params={"granularity": "year"})

        assert [p["total_sales"] for p in response.json()] == [30100, 38000, 550]

    def test_trend_bad_granularity(self, client):
        assert client.get("/api/v1/analysis/trend", params={"granularity": "week"}).status_code == 400

    def test_cumulative(self, client):
        response = client.get("/api/v1/analysis/cumulative")

        assert [p["running_total_sales"] for p in response.json()] == [30100, 68100, 68650]

    def test_performance(self, client):
        response = client.get("/api/v1/analysis/performance", params={"product_name": "Sport-100 Helmet"})

        trends = [p["year_over_year_trend"] for p in response.json()]
        assert trends == ["Increase", "Decrease"]

    def test_part_to_whole(self, client):
        body = client.get("/api/v1/analysis/part-to-whole").json()

        assert body[0]["category"] == "Bikes"
        assert body[0]["percentage_of_total"] == pytest.approx(99.11)

    def test_segments(self, client):
        customers = client.get("/api/v1/analysis/segments/customers", params={"as_of": "2025-01-01"}).json()
        cost_ranges = client.get("/api/v1/analysis/segments/cost-ranges").json()

        assert customers == [{"segment": "New", "count": 2}, {"segment": "VIP", "count": 1}]
        assert sum(r["count"] for r in cost_ranges) == 5

    def test_measures(self, client):
        body = client.get("/api/v1/analysis/measures").json()

        assert {"measure_name": "Total Sales", "measure_value": 72650.0} in body

    def test_date_range(self, client):
        body = client.get("/api/v1/analysis/date-range", params={"as_of": "2025-01-01"}).json()

        assert body["order_range_months"] == 25
        assert body["youngest_customer_age"] == 17

    def test_dimensions(self, client):
        assert client.get("/api/v1/analysis/dimensions/countries").json() == ["Australia", "Germany", "United States"]
        assert len(client.get("/api/v1/analysis/dimensions/products").json()) == 5
