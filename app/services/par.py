from __future__ import annotations

import logging
import math
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.models import Customer, CustomerProductPar
from app.schemas.par import (
    CustomerParBatchItem,
    CustomerParBatchResponse,
    CustomerParBatchResult,
)


logger = logging.getLogger(__name__)


def _get_customer_or_404(db: Session, customer_id: int) -> Customer:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if customer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return customer


def _write_par(db: Session, customer_id: int, sku: str, par_qty: float) -> CustomerProductPar:
    sku = sku.strip()
    if not sku:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="sku is required")
    if not math.isfinite(par_qty):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="par_qty must be a finite number")
    if par_qty < 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="par_qty must be >= 0")

    row = (
        db.query(CustomerProductPar)
        .filter(CustomerProductPar.customer_id == customer_id, CustomerProductPar.sku == sku)
        .first()
    )
    if row is None:
        row = CustomerProductPar(customer_id=customer_id, sku=sku)
        db.add(row)

    row.par_qty = math.ceil(par_qty)
    row.updated_at = datetime.now(timezone.utc)
    return row


def upsert_customer_par(db: Session, customer_id: int, sku: str, par_qty: float) -> CustomerProductPar:
    """Create or overwrite the agreed PAR for (customer, sku)."""
    _get_customer_or_404(db, customer_id)
    row = _write_par(db, customer_id, sku, par_qty)
    db.commit()
    db.refresh(row)
    return row


def upsert_customer_pars(
    db: Session,
    customer_id: int,
    items: list[CustomerParBatchItem],
) -> CustomerParBatchResponse:
    """Save many PARs; each item is committed on its own.

    A failing item is reported and does not undo items saved before it.
    """
    _get_customer_or_404(db, customer_id)

    results: list[CustomerParBatchResult] = []
    for item in items:
        try:
            row = _write_par(db, customer_id, item.sku, item.par_qty)
            db.commit()
        except HTTPException as exc:
            results.append(CustomerParBatchResult(sku=item.sku, ok=False, error=str(exc.detail)))
            continue
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Failed to save PAR for customer %s sku %s", customer_id, item.sku)
            results.append(CustomerParBatchResult(sku=item.sku, ok=False, error=str(exc)))
            continue
        results.append(CustomerParBatchResult(sku=row.sku, ok=True, par_qty=row.par_qty))

    saved = sum(1 for r in results if r.ok)
    return CustomerParBatchResponse(saved=saved, failed=len(results) - saved, results=results)


def list_customer_pars(db: Session, customer_id: int) -> list[CustomerProductPar]:
    _get_customer_or_404(db, customer_id)
    return (
        db.query(CustomerProductPar)
        .filter(CustomerProductPar.customer_id == customer_id)
        .order_by(CustomerProductPar.sku)
        .all()
    )
