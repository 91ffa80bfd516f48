"""
Configuration API endpoints.

Provides access to server configuration for clients.
"""

from dataclasses import asdict
from fastapi import APIRouter
from typing import Dict, Any

from mowbot.config import get_settings

router = APIRouter(prefix="/config", tags=["config"])


@router.get("/brain")
async def get_brain_config() -> Dict[str, Any]:
    """
    Get brain execution parameters.

    Returns:
        dict: Step budget, SAFE promotion delay, diagnostic cadence and limits
    """
    brain = get_settings().brain

    return {
        # Supervisor
        "STEP_BUDGET_MS": brain.STEP_BUDGET_MS,
        "SAFE_AFTER_SECONDS": brain.SAFE_AFTER_SECONDS,
        "DIAGNOSTIC_PERIOD_SECONDS": brain.DIAGNOSTIC_PERIOD_SECONDS,

        # Scripts
        "MAX_CODE_SIZE_KB": brain.MAX_CODE_SIZE_KB,
        "ALLOWED_IMPORTS": list(brain.ALLOWED_IMPORTS),

        # History
        "MAX_REVISIONS": brain.MAX_REVISIONS,
        "TELEMETRY_HISTORY": brain.TELEMETRY_HISTORY,
        "CONSOLE_HISTORY": brain.CONSOLE_HISTORY,
        "WATCH_LIMIT": brain.WATCH_LIMIT,
    }


@router.get("/simulation")
async def get_simulation_config() -> Dict[str, Any]:
    """
    Get simulation and robot parameters.

    Returns:
        dict: Tick rate, field bounds and robot limits
    """
    settings = get_settings()
    simulation = settings.simulation

    return {
        "TICK_RATE": simulation.TICK_RATE,
        "MAX_DT": simulation.MAX_DT,
        "BOUNDS": simulation.BOUNDS,
        "WORLD_SIZE": simulation.WORLD_SIZE,
        "DEFAULT_SEED": simulation.DEFAULT_SEED,
        "HAZARDS": list(simulation.HAZARDS),
        "robot": asdict(settings.robot),
    }
