"""
Health check endpoints.

Liveness reports the archive connection and the brain's execution state;
readiness gates on the archive only.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime
from typing import Optional

from mowbot.database import get_db
from mowbot.config import get_settings
from mowbot.core.engine import SimulationEngine, get_engine

router = APIRouter()
settings = get_settings()


def _probe_archive(db: Session) -> Optional[str]:
    """Run a trivial query; returns the error text, or None when reachable."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return str(e)
    return None


@router.get("/health")
async def health_check(
    db: Session = Depends(get_db),
    engine: SimulationEngine = Depends(get_engine),
) -> dict:
    """
    Liveness check.

    Example response:
        {
            "status": "healthy",
            "app_name": "MowBot",
            "version": "0.1.0",
            "timestamp": "2024-12-11T23:00:00Z",
            "database": "connected",
            "brain_state": "RUNNING",
            "simulation": {"running": true, "playing": true, "tick": 1234}
        }
    """
    error = _probe_archive(db)

    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": settings.VERSION,
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "database": "connected" if error is None else f"error: {error}",
        "brain_state": engine.supervisor.state.value,
        "simulation": {
            "running": engine.is_running,
            "playing": engine.playing,
            "tick": engine.tick_count,
        },
    }


@router.get("/health/ready")
async def readiness_check(db: Session = Depends(get_db)) -> dict:
    """Ready once the revision archive answers queries."""
    error = _probe_archive(db)
    return {
        "ready": error is None,
        "checks": {"database": "ok" if error is None else f"failed: {error}"},
    }
