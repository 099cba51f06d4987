from fastapi import APIRouter

from app.api.v1.endpoints import (
    demand_par,
    ingest,
    inventory,
    par,
    purchase_order,
    purchase_planning,
    reports,
    sales_target,
)

api_router = APIRouter()

api_router.include_router(ingest.router, prefix="/ingest", tags=["ingest"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
api_router.include_router(demand_par.router, prefix="/reports", tags=["demand-par"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(par.router, prefix="/par", tags=["par"])
api_router.include_router(purchase_planning.router, prefix="/purchase-planning", tags=["purchase-planning"])
api_router.include_router(purchase_order.router, prefix="/purchase-order", tags=["purchase-order"])
api_router.include_router(sales_target.router, prefix="/targets", tags=["targets"])
