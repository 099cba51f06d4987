from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.core.db import get_db
from app.services.shopify_client import ShopifyUnavailableError, get_shopify_client


class _FailingLevels:
    def fetch_inventory_levels(self):
        raise ShopifyUnavailableError("Shopify request failed: timed out")


@pytest.fixture
def client(db_session):
    def _get_db_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _ingest(client) -> None:
    now = datetime.now(timezone.utc)
    resp = client.post(
        "/api/v1/ingest/customers",
        json={"items": [
            {"shopify_customer_id": "c-1", "salon_name": "Glow", "sales_rep": "Amy"},
            {"shopify_customer_id": "c-2", "salon_name": "Quiet", "sales_rep": "Amy"},
        ]},
    )
    assert resp.json() == {"inserted": 2, "updated": 0}

    resp = client.post(
        "/api/v1/ingest/variants",
        json={"items": [
            {"sku": "OLA-3", "product_title": "No.3", "vendor": "Olaplex", "unit_cost": 4},
            {"sku": "OLA-4", "product_title": "No.4", "vendor": "Olaplex", "unit_cost": 6},
        ]},
    )
    assert resp.json()["inserted"] == 2

    resp = client.post(
        "/api/v1/ingest/orders",
        json={"items": [
            {
                "shopify_order_id": "1001",
                "shopify_customer_id": "c-1",
                "processed_at": (now - timedelta(days=2)).isoformat(),
                "line_items": [
                    {"sku": "OLA-3", "product_title": "No.3", "product_vendor": "Olaplex", "quantity": 5, "price": 10},
                ],
            },
            {
                "shopify_order_id": "1002",
                "shopify_customer_id": "c-2",
                "processed_at": (now - timedelta(days=90)).isoformat(),
                "line_items": [
                    {"sku": "OLA-4", "product_title": "No.4", "product_vendor": "Olaplex", "quantity": 1, "price": 12},
                ],
            },
        ]},
    )
    assert resp.json() == {"inserted": 2, "updated": 0}


def _window() -> dict:
    today = datetime.now(timezone.utc).date()
    return {"date_from": (today - timedelta(days=30)).isoformat(), "date_to": today.isoformat()}


def test_sales_by_customer(client):
    _ingest(client)

    resp = client.get("/api/v1/reports/sales-by-customer", params=_window())

    assert resp.status_code == 200
    rows = resp.json()["rows"]
    assert [r["salon_name"] for r in rows] == ["Glow"]
    assert rows[0]["net_ex"] == pytest.approx(50)
    assert rows[0]["cost"] == pytest.approx(20)
    assert rows[0]["margin_pct"] == pytest.approx(60)


def test_inverted_date_range_is_rejected(client):
    window = _window()

    resp = client.get(
        "/api/v1/reports/sales-by-customer",
        params={"date_from": window["date_to"], "date_to": window["date_from"]},
    )

    assert resp.status_code == 400


def test_customer_dropoff_and_vendor_scorecard(client):
    _ingest(client)

    dropoff = client.get("/api/v1/reports/customer-dropoff", params={"days": 30, "rep": "Amy"}).json()
    assert [r["salon_name"] for r in dropoff["rows"]] == ["Quiet"]
    assert dropoff["rows"][0]["days_since_last_order"] >= 89

    vendors = client.get("/api/v1/reports/vendor-scorecard", params=_window()).json()
    assert [(r["vendor"], r["orders"]) for r in vendors["rows"]] == [("Olaplex", 1)]


def test_rep_scorecard_with_target(client):
    _ingest(client)
    window = _window()

    resp = client.post(
        "/api/v1/targets/",
        json={"sales_rep": "Amy", "month": window["date_to"], "target_amount": 500},
    )
    assert resp.status_code == 200

    card = client.get("/api/v1/reports/rep-scorecard", params={"sales_rep": "Amy", **window}).json()
    assert card["sales_ex"] == pytest.approx(50)
    assert card["target"] is not None
    assert card["total_customers"] == 2

    targets = client.get("/api/v1/targets/", params={"sales_rep": "Amy"}).json()
    assert len(targets) == 1
    assert targets[0]["month"].endswith("-01")


def test_gap_analysis(client):
    _ingest(client)

    resp = client.post("/api/v1/reports/gap-analysis", json={"vendor": "Olaplex", **_window()})

    assert resp.status_code == 200
    data = resp.json()
    assert data["products"] == ["No.3", "No.4"]
    assert [(r["salon_name"], r["gap_count"]) for r in data["rows"]] == [("Glow", 1)]


def test_inventory_snapshot_import(client):
    resp = client.post(
        "/api/v1/inventory/snapshots/import",
        json={"items": [{"sku": "OLA-3", "location_id": "1", "snapshot_date": "2025-03-01", "available": 0}]},
    )

    assert resp.json() == {"inserted": 1, "updated": 0}


def test_inventory_snapshot_run_needs_shopify(client):
    app.dependency_overrides[get_shopify_client] = lambda: None

    resp = client.post("/api/v1/inventory/snapshots/run")

    assert resp.status_code == 503


def test_inventory_snapshot_run_with_failing_source(client):
    app.dependency_overrides[get_shopify_client] = lambda: _FailingLevels()

    resp = client.post("/api/v1/inventory/snapshots/run")

    assert resp.status_code == 503
    assert resp.json()["detail"].startswith("inventory source unavailable")
