from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.core.db import get_db
from app.services.csv_export import FORECAST_CSV_COLUMNS
from app.services.shopify_client import get_shopify_client
from tests.test_utils import FakeStockSource, create_customer, create_order, create_variant


@pytest.fixture
def stock_source():
    return FakeStockSource({"OLA-3": (20, 0)})


@pytest.fixture
def client(db_session, stock_source):
    def _get_db_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_override
    app.dependency_overrides[get_shopify_client] = lambda: stock_source
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _seed(db_session):
    create_variant(db_session, "OLA-3", pack_size=5, moq=10, unit_cost=5, product_title="No.3")
    create_variant(db_session, "OLA-4", product_title="No.4")
    salon = create_customer(db_session, "Glow")
    now = datetime.now(timezone.utc)
    create_order(db_session, salon, now - timedelta(days=5), [{"sku": "OLA-3", "quantity": 60}])


PLAN = {"supplier": "Olaplex", "days_of_stock": 14, "lookback_days": 30}


def test_plan_for_supplier(client, db_session):
    _seed(db_session)

    resp = client.post("/api/v1/purchase-planning/plan", json=PLAN)

    assert resp.status_code == 200
    data = resp.json()
    rows = {r["sku"]: r for r in data["rows"]}
    assert rows["OLA-3"]["suggested_qty"] == 10
    assert rows["OLA-3"]["avg_daily_rate"] == pytest.approx(2.0)
    assert rows["OLA-4"]["suggested_qty"] == 0
    assert data["total_suggested_units"] == 10
    assert data["grand_total"] == pytest.approx(50)


def test_plan_validation(client):
    assert client.post("/api/v1/purchase-planning/plan", json={"days_of_stock": 14}).status_code == 400
    assert client.post("/api/v1/purchase-planning/plan", json={**PLAN, "days_of_stock": 0}).status_code == 422
    assert client.post("/api/v1/purchase-planning/plan", json={**PLAN, "lookback_days": 3}).status_code == 422


def test_unknown_sort_field_is_rejected(client, db_session):
    _seed(db_session)

    resp = client.post("/api/v1/purchase-planning/plan", json={**PLAN, "sort_by": "colour"})

    assert resp.status_code == 400


def test_plan_is_503_when_stock_source_fails(client, db_session, stock_source):
    _seed(db_session)
    stock_source.fail = True

    resp = client.post("/api/v1/purchase-planning/plan", json=PLAN)

    assert resp.status_code == 503
    assert resp.json()["detail"].startswith("forecast unavailable")


def test_plan_is_503_when_shopify_not_configured(client, db_session):
    _seed(db_session)
    app.dependency_overrides[get_shopify_client] = lambda: None

    resp = client.post("/api/v1/purchase-planning/plan", json=PLAN)

    assert resp.status_code == 503


def test_export_csv(client, db_session):
    _seed(db_session)

    resp = client.post("/api/v1/purchase-planning/export", json=PLAN)

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert 'filename="purchase-plan-Olaplex.csv"' in resp.headers["content-disposition"]
    lines = resp.text.splitlines()
    assert lines[0] == ",".join(FORECAST_CSV_COLUMNS)
    ola3 = next(line for line in lines[1:] if line.startswith("OLA-3,"))
    assert ola3.endswith(",10")


def test_export_with_non_ascii_supplier(client, db_session):
    _seed(db_session)

    resp = client.post("/api/v1/purchase-planning/export", json={**PLAN, "supplier": 'Łuna™ "Pro"'})

    assert resp.status_code == 200
    disposition = resp.headers["content-disposition"]
    assert 'filename="purchase-plan-unaTM-Pro-.csv"' in disposition
    assert "filename*=UTF-8''purchase-plan-%C5%81una%E2%84%A2%20%22Pro%22.csv" in disposition
