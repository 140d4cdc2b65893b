"""
Health and dashboard stats endpoint tests.
"""

from datetime import timedelta

from stockroom.services import news_service
from stockroom.time_utils import utcnow


def test_health_is_public(client, backend):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "healthy"
    assert body["store"]["backend"] == backend
    assert body["store"]["details"] == {"users": 0, "products": 0, "business_news": 0}


def test_stats_requires_auth(client):
    assert client.get("/api/stats").status_code == 401


def test_stats_on_empty_inventory(client, headers):
    body = client.get("/api/stats", headers=headers).get_json()
    assert body["total_products"] == 0
    assert body["low_stock_products"] == 0
    assert body["active_news"] == 0
    assert body["last_update"].endswith("Z")


def test_stats_counts(app, client, headers):
    client.post("/api/products", json={"name": "ARROZ", "purchase_price": 10, "stock": 1, "min_stock": 5}, headers=headers)
    client.post("/api/products", json={"name": "AZUCAR", "purchase_price": 10, "stock": 5, "min_stock": 5}, headers=headers)
    latest = client.post("/api/products", json={"name": "CAFE", "purchase_price": 10}, headers=headers).get_json()

    news_service.create_news(data={"title": "A", "content": "B", "is_permanent": False})
    news_service.create_news(
        data={"title": "C", "content": "D", "is_permanent": False},
        now=utcnow() - timedelta(days=10),
    )

    body = client.get("/api/stats", headers=headers).get_json()
    assert body["total_products"] == 3
    assert body["low_stock_products"] == 1
    assert body["active_news"] == 1
    assert body["last_update"] == latest["updated_at"]
