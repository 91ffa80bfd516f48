"""
World API endpoints.

Simulation state, the mowing zone and its coverage path, world
regeneration and pause control.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from mowbot.config import get_settings
from mowbot.core.coverage import plan_coverage
from mowbot.core.engine import SimulationEngine, get_engine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/world", tags=["world"])


class RegenerateRequest(BaseModel):
    """Request model for regenerating the world."""
    seed: Optional[int] = Field(None, description="Random seed (default from config)")
    hazards: Optional[List[str]] = Field(None, description="Enabled hazards (default all)")


class PlayingRequest(BaseModel):
    """Request model for pausing or resuming the simulation."""
    playing: bool


def _points(points) -> List[Dict[str, float]]:
    return [{"x": p.x, "z": p.z} for p in points]


@router.get("")
async def get_world(engine: SimulationEngine = Depends(get_engine)) -> Dict[str, Any]:
    """Simulation state snapshot plus the world layout."""
    return {**engine.get_state_snapshot(), "world": engine.world.to_dict()}


@router.get("/zone")
async def get_zone(engine: SimulationEngine = Depends(get_engine)) -> Dict[str, Any]:
    """The mowing zone polygon."""
    return {"zone": _points(engine.world.get_mowing_zone())}


@router.get("/coverage")
async def get_coverage_path(
    tool_width: float = Query(default=1.0, gt=0, description="Mower deck width"),
    engine: SimulationEngine = Depends(get_engine)
) -> Dict[str, Any]:
    """
    Plan a boustrophedon path over the mowing zone.

    Returns:
        Waypoints in visiting order and the current cut fraction
    """
    path = plan_coverage(engine.world.get_mowing_zone(), tool_width)
    return {
        "tool_width": tool_width,
        "count": len(path),
        "waypoints": _points(path),
        "coverage": engine.world.coverage_fraction(),
    }


@router.post("/regenerate")
async def regenerate_world(
    request: RegenerateRequest,
    engine: SimulationEngine = Depends(get_engine)
) -> Dict[str, Any]:
    """
    Generate a new world and put the robot back at the origin.

    Raises:
        400: Unknown hazard name
    """
    if request.hazards is not None:
        known = set(get_settings().simulation.HAZARDS)
        unknown = [h for h in request.hazards if h not in known]
        if unknown:
            raise HTTPException(
                status_code=400,
                detail=f"Unknown hazards: {', '.join(unknown)}. Must be any of: {', '.join(sorted(known))}"
            )

    engine.regenerate_world(seed=request.seed, hazards=request.hazards)
    return engine.world.to_dict()


@router.post("/playing")
async def set_playing(
    request: PlayingRequest,
    engine: SimulationEngine = Depends(get_engine)
) -> Dict[str, Any]:
    """Pause or resume simulated time."""
    engine.set_playing(request.playing)
    return {"playing": engine.playing}
