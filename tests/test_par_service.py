from __future__ import annotations

import pytest
from fastapi import HTTPException

from app.models.models import CustomerProductPar
from app.schemas.par import CustomerParBatchItem
from app.services.par import list_customer_pars, upsert_customer_par, upsert_customer_pars
from tests.test_utils import create_customer


@pytest.mark.usefixtures("db_session")
class TestCustomerPar:
    def test_upsert_creates_then_overwrites(self, db_session):
        salon = create_customer(db_session, "Glow")

        first = upsert_customer_par(db_session, salon.id, "OLA-3", 60)
        second = upsert_customer_par(db_session, salon.id, "OLA-3", 40)

        assert first.id == second.id
        rows = db_session.query(CustomerProductPar).filter(CustomerProductPar.customer_id == salon.id).all()
        assert len(rows) == 1
        assert rows[0].par_qty == 40

    def test_fractional_par_rounds_up(self, db_session):
        salon = create_customer(db_session, "Glow")

        row = upsert_customer_par(db_session, salon.id, "OLA-3", 12.2)

        assert row.par_qty == 13

    def test_unknown_customer(self, db_session):
        with pytest.raises(HTTPException) as exc_info:
            upsert_customer_par(db_session, 999_999, "OLA-3", 1)

        assert exc_info.value.status_code == 404

    def test_batch_items_are_independent(self, db_session):
        salon = create_customer(db_session, "Glow")

        response = upsert_customer_pars(
            db_session,
            salon.id,
            [
                CustomerParBatchItem(sku="OLA-3", par_qty=60),
                CustomerParBatchItem(sku="OLA-4", par_qty=-1),
                CustomerParBatchItem(sku=" ", par_qty=5),
                CustomerParBatchItem(sku="OLA-5", par_qty=0),
            ],
        )

        assert response.saved == 2
        assert response.failed == 2
        assert [r.ok for r in response.results] == [True, False, False, True]
        assert "par_qty" in response.results[1].error

        saved = {p.sku: p.par_qty for p in list_customer_pars(db_session, salon.id)}
        assert saved == {"OLA-3": 60, "OLA-5": 0}

    def test_non_finite_par_is_rejected_per_item(self, db_session):
        salon = create_customer(db_session, "Glow")

        response = upsert_customer_pars(
            db_session,
            salon.id,
            [
                CustomerParBatchItem(sku="OLA-3", par_qty=3),
                CustomerParBatchItem(sku="OLA-4", par_qty=float("inf")),
                CustomerParBatchItem(sku="OLA-5", par_qty=float("nan")),
            ],
        )

        assert (response.saved, response.failed) == (1, 2)
        assert [r.ok for r in response.results] == [True, False, False]
        assert "finite" in response.results[1].error

    def test_single_non_finite_par_is_rejected(self, db_session):
        salon = create_customer(db_session, "Glow")

        with pytest.raises(HTTPException) as exc_info:
            upsert_customer_par(db_session, salon.id, "OLA-3", float("inf"))

        assert exc_info.value.status_code == 400
