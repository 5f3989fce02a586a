"""
MeshPulse — FastAPI Application Entry Point
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from api.routes import clusters, sensors
from api.schemas import CategoryOut
from api.state import get_monitor, set_monitor
from pipeline import config
from pipeline.aqi.categories import all_categories
from pipeline.monitor import MeshMonitor

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    from pipeline.main import build_monitor

    # ── Step 1: Build the monitor and compute the first snapshot ──────────────
    monitor = build_monitor()
    monitor.refresh()
    set_monitor(monitor)
    logger.info("MeshPulse API starting up — first snapshot published")

    # ── Step 2: Periodic refresh ──────────────────────────────────────────────
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        func=monitor.refresh,
        trigger="interval",
        seconds=config.REFRESH_INTERVAL_SECONDS,
        id="mesh_refresh",
        name="Mesh Refresh",
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    yield
    scheduler.shutdown(wait=False)
    set_monitor(None)
    logger.info("MeshPulse API shutting down")


app = FastAPI(
    title="MeshPulse API",
    description="Community Sensor Mesh Trust Engine",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(sensors.router,  prefix="/api/sensors",  tags=["Sensors"])
app.include_router(clusters.router, prefix="/api/clusters", tags=["Clusters"])


@app.get("/api/health", tags=["Health"])
def health():
    return {
        "status": "ok",
        "service": "meshpulse-api",
        "version": "1.0.0",
        "checked_at": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/api/categories", response_model=list[CategoryOut], tags=["Categories"])
def categories():
    """NAQI categories with their presentation colours and descriptions."""
    return all_categories()


@app.post("/api/refresh", tags=["Refresh"])
def refresh(monitor: MeshMonitor = Depends(get_monitor)):
    """Run a refresh cycle now instead of waiting for the scheduler."""
    snapshot = monitor.refresh()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="Refresh failed and no snapshot is available")
    diff = monitor.last_diff
    return {
        "generated_at": snapshot.generated_at.isoformat(),
        "cycle": monitor.cycles,
        "added": diff.added,
        "updated": diff.updated,
        "removed": diff.removed,
    }
