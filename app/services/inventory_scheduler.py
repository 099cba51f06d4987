from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from app.core.config import Settings, settings
from app.core.db import SessionLocal, engine
from app.services.inventory import take_inventory_snapshot
from app.services.shopify_client import ShopifyClient


logger = logging.getLogger(__name__)


class InventorySnapshotScheduler:
    """Background scheduler taking daily Shopify inventory snapshots.

    Snapshots are the only record of historical stock, so out-of-stock days
    can only be counted for days this job has run. Controlled from FastAPI
    startup/shutdown events.
    """

    def __init__(self, interval_hours: int = 24, config: Settings = settings) -> None:
        self._interval_hours = interval_hours
        self._config = config
        self._scheduler: Optional[BackgroundScheduler] = None

        # Fixed BIGINT shared by all backend instances.
        self._lock_key: int = 9_223_372_036_854_770_101
        self._lock_connection = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        """Start the APScheduler instance if enabled and not already running."""
        if not self._config.INVENTORY_SNAPSHOT_ENABLED:
            logger.warning("InventorySnapshotScheduler disabled via INVENTORY_SNAPSHOT_ENABLED")
            return

        if not self._config.shopify_configured:
            logger.warning("InventorySnapshotScheduler disabled: Shopify credentials are not configured")
            return

        if self.running:
            logger.warning("InventorySnapshotScheduler already running, skipping start")
            return

        if not self._acquire_advisory_lock():
            logger.warning("InventorySnapshotScheduler disabled (advisory lock not acquired)")
            return

        scheduler = BackgroundScheduler(timezone="UTC")
        scheduler.add_job(
            self._run_snapshot_job,
            trigger=IntervalTrigger(hours=self._interval_hours),
            id="inventory_snapshot_job",
            replace_existing=True,
            max_instances=1,
            next_run_time=datetime.now(timezone.utc),
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.warning("InventorySnapshotScheduler started with interval %s hours", self._interval_hours)

    def shutdown(self) -> None:
        if self._scheduler is not None:
            try:
                self._scheduler.shutdown(wait=False)
                logger.warning("InventorySnapshotScheduler stopped")
            finally:
                self._scheduler = None

        self._release_advisory_lock()

    def _acquire_advisory_lock(self) -> bool:
        """Hold a PostgreSQL advisory lock so only one process runs the job.

        Other databases have no shared lock and are assumed single-instance.
        """
        if engine.dialect.name != "postgresql":
            return True

        if self._lock_connection is not None:
            return True

        conn = None
        try:
            conn = engine.raw_connection()
            cursor = conn.cursor()
            cursor.execute("SELECT pg_try_advisory_lock(%s);", (self._lock_key,))
            row = cursor.fetchone()
            acquired = bool(row[0]) if row is not None else False
            cursor.close()

            if not acquired:
                conn.rollback()
                conn.close()
                return False

            conn.commit()
            self._lock_connection = conn
            return True
        except Exception:
            logger.exception("Failed to acquire PostgreSQL advisory lock")
            if conn is not None:
                conn.close()
            return False

    def _release_advisory_lock(self) -> None:
        if self._lock_connection is None:
            return

        try:
            cursor = self._lock_connection.cursor()
            cursor.execute("SELECT pg_advisory_unlock(%s);", (self._lock_key,))
            self._lock_connection.commit()
            cursor.close()
        except Exception:
            # Closing the connection releases the lock anyway.
            logger.exception("Failed to release PostgreSQL advisory lock explicitly")
        finally:
            self._lock_connection.close()
            self._lock_connection = None

    def _run_snapshot_job(self) -> None:
        """Take one snapshot; failures are logged so the process keeps running."""
        logger.info("Inventory snapshot job started")
        db: Session = SessionLocal()
        try:
            with ShopifyClient.from_settings(self._config) as client:
                take_inventory_snapshot(db, client, datetime.now(timezone.utc).date())
            logger.info("Inventory snapshot job completed")
        except Exception:
            db.rollback()
            logger.exception("Error while running inventory snapshot job")
        finally:
            db.close()
