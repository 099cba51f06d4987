import logging

from fastapi import FastAPI

from app.api.v1.router import api_router
from app.core.config import settings
from app.services.inventory_scheduler import InventorySnapshotScheduler


logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="SalonHub Reporting")
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def _startup_event() -> None:
    scheduler = InventorySnapshotScheduler(interval_hours=settings.INVENTORY_SNAPSHOT_INTERVAL_HOURS)
    scheduler.start()
    app.state.inventory_scheduler = scheduler


@app.on_event("shutdown")
def _shutdown_event() -> None:
    scheduler = getattr(app.state, "inventory_scheduler", None)
    if scheduler is not None:
        scheduler.shutdown()


@app.get("/")
def root():
    return {"status": "ok", "message": "SalonHub reporting backend running"}
