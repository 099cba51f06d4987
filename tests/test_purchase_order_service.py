from __future__ import annotations

from datetime import timedelta

import pytest

from app.models.models import PurchaseOrder
from app.schemas.purchase_order import PurchaseOrderFromPlanRequest
from app.services.purchase_order import create_purchase_order_from_plan
from app.services.shopify_client import UpstreamUnavailableError
from tests.test_utils import NOW, FakeStockSource, create_customer, create_order, create_variant


def _seed(db_session):
    create_variant(db_session, "OLA-3", pack_size=5, moq=10, unit_cost=5, product_title="No.3")
    create_variant(db_session, "OLA-4", unit_cost=7, product_title="No.4")
    salon = create_customer(db_session, "Glow")
    create_order(db_session, salon, NOW - timedelta(days=5), [{"sku": "OLA-3", "quantity": 60}])


@pytest.mark.usefixtures("db_session")
class TestCreatePurchaseOrderFromPlan:
    def test_positive_suggestions_become_auto_items(self, db_session):
        _seed(db_session)
        request = PurchaseOrderFromPlanRequest(supplier="Olaplex", lookback_days=30, comment="weekly")

        po = create_purchase_order_from_plan(db_session, FakeStockSource({"OLA-3": (20, 0)}), request, now=NOW)

        assert po.status == "draft"
        assert po.supplier == "Olaplex"
        assert po.comment == "weekly"
        assert [(i.sku, i.quantity, i.source) for i in po.items] == [("OLA-3", 10, "auto")]
        assert float(po.items[0].unit_cost) == pytest.approx(5)
        assert po.items[0].title == "No.3"

    def test_overrides_are_manual_and_zero_drops_the_row(self, db_session):
        _seed(db_session)
        request = PurchaseOrderFromPlanRequest(
            supplier="Olaplex",
            lookback_days=30,
            quantity_overrides={"OLA-3": 0, "OLA-4": 3},
        )

        po = create_purchase_order_from_plan(db_session, FakeStockSource({"OLA-3": (20, 0)}), request, now=NOW)

        assert [(i.sku, i.quantity, i.source) for i in po.items] == [("OLA-4", 3, "manual")]

    def test_upstream_failure_creates_nothing(self, db_session):
        _seed(db_session)
        request = PurchaseOrderFromPlanRequest(supplier="Olaplex", lookback_days=30)

        with pytest.raises(UpstreamUnavailableError):
            create_purchase_order_from_plan(db_session, FakeStockSource(fail=True), request, now=NOW)

        assert db_session.query(PurchaseOrder).count() == 0
