#!/usr/bin/env python3
"""
Basic smoke tests for the module-level app used by uvicorn.
No backend is reachable here; only routes that stay local are exercised.
"""

from fastapi.testclient import TestClient


def test_health_endpoint():
    """Health endpoint returns 200 with {"ok": true}"""
    # Import here so the autouse env fixture is active first
    from storefront.main import app

    client = TestClient(app)
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_store_status_without_backend():
    """Status is served from the default schedule before any refresh"""
    from storefront.main import app

    client = TestClient(app)
    response = client.get("/api/store/status")

    assert response.status_code == 200
    data = response.json()
    assert set(data) >= {"is_open", "accepting_orders", "next_open_label", "source"}


def test_admin_routes_require_api_key():
    from storefront.main import app

    client = TestClient(app)
    assert client.get("/api/dashboard/stats").status_code == 401
    assert client.put("/api/store/closure", json={"isActive": False}).status_code == 401


def test_cors_preflight():
    from storefront.main import app

    client = TestClient(app)
    response = client.options(
        "/api/store/status",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code == 200


def test_app_routes_registered():
    """The app serves every storefront route"""
    from storefront.main import app

    paths = set(app.openapi()["paths"])
    assert {
        "/api/store/status",
        "/api/store/closure",
        "/api/config",
        "/api/orders",
        "/api/orders/{order_id}/status",
        "/api/orders/rates",
        "/api/orders/kasir",
        "/api/products",
        "/api/vouchers",
        "/api/dashboard/stats",
    } <= paths

    # /healthz is kept out of the schema
    assert "/healthz" not in paths
    assert TestClient(app).get("/healthz").status_code == 200
