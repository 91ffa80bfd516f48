"""
Telemetry API endpoints.

Exposes the brain's numeric samples, watches, console and debug overlay,
plus the supervisor's diagnostic events.
"""

from fastapi import APIRouter, Depends
from typing import Any, Dict, List

from mowbot.core.engine import SimulationEngine, get_engine

router = APIRouter(prefix="/telemetry", tags=["telemetry"])


@router.get("")
async def get_telemetry(engine: SimulationEngine = Depends(get_engine)) -> Dict[str, Any]:
    """Current telemetry samples, watches, console lines and debug overlay."""
    return engine.telemetry.snapshot()


@router.get("/diagnostics")
async def list_diagnostics(engine: SimulationEngine = Depends(get_engine)) -> List[Dict[str, Any]]:
    """
    List diagnostic events, oldest first.

    Returns:
        List of PERIODIC, ALERT and STOP events
    """
    return [event.to_dict() for event in engine.telemetry.diagnostics]


@router.delete("/diagnostics")
async def clear_diagnostics(engine: SimulationEngine = Depends(get_engine)) -> Dict[str, int]:
    """Forget all recorded diagnostic events."""
    count = len(engine.telemetry.diagnostics)
    engine.telemetry.clear_diagnostics()
    return {"cleared": count}
