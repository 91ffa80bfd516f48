"""
Brain API endpoints.

Deploy, validate and control the brain script running on the robot.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from mowbot.brain_runtime.sandbox import BrainCompileError, BrainSandbox
from mowbot.brain_runtime.templates import get_template_code, get_template_list
from mowbot.core.engine import SimulationEngine, get_engine
from mowbot.core.supervisor import SupervisorError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/brain", tags=["brain"])


# Request/Response models
class DeployRequest(BaseModel):
    """Request model for deploying a brain."""
    source: str = Field(..., description="Brain script source")
    note: Optional[str] = Field(None, max_length=200, description="Optional revision note")


class CompileRequest(BaseModel):
    """Request model for validating a brain."""
    source: str = Field(..., description="Brain script source")


class CompileResponse(BaseModel):
    """Result of a validation-only compile."""
    valid: bool
    error: Optional[str] = None


class TemplateInfo(BaseModel):
    """Template metadata."""
    id: str
    name: str
    difficulty: int
    description: str
    features: List[str]


class TemplateCode(BaseModel):
    """Template source."""
    id: str
    code: str


def _status(engine: SimulationEngine) -> Dict[str, Any]:
    return engine.supervisor.status()


@router.post("/deploy", status_code=201)
async def deploy_brain(
    request: DeployRequest,
    engine: SimulationEngine = Depends(get_engine)
) -> Dict[str, Any]:
    """
    Compile a brain, swap it in and start running it.

    Raises:
        400: Compile error (the running brain is left untouched)
    """
    try:
        revision = engine.supervisor.deploy(request.source, note=request.note)
    except BrainCompileError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"revision_id": revision.id, **_status(engine)}


@router.post("/compile", response_model=CompileResponse)
async def compile_brain(request: CompileRequest):
    """
    Validate a brain without deploying it.

    Returns:
        Whether the script compiled, and the error message if not
    """
    try:
        BrainSandbox().compile(request.source)
    except BrainCompileError as e:
        return CompileResponse(valid=False, error=str(e))
    return CompileResponse(valid=True)


@router.post("/stop")
async def stop_brain(engine: SimulationEngine = Depends(get_engine)) -> Dict[str, Any]:
    """Disengage autonomy. The brain stays loaded."""
    engine.supervisor.stop()
    return _status(engine)


@router.post("/resume")
async def resume_brain(engine: SimulationEngine = Depends(get_engine)) -> Dict[str, Any]:
    """
    Re-engage the loaded brain without re-running init.

    Raises:
        409: No brain deployed
    """
    try:
        engine.supervisor.resume()
    except SupervisorError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _status(engine)


@router.post("/revert")
async def revert_brain(engine: SimulationEngine = Depends(get_engine)) -> Dict[str, Any]:
    """
    Redeploy the most recent SAFE revision.

    Raises:
        409: No SAFE revision available
    """
    try:
        revision = engine.supervisor.revert_to_safe()
    except SupervisorError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except BrainCompileError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Reverted to SAFE source as revision {revision.id}")
    return {"revision_id": revision.id, **_status(engine)}


@router.get("/status")
async def brain_status(engine: SimulationEngine = Depends(get_engine)) -> Dict[str, Any]:
    """State, error log, compile error, active revision and task metrics."""
    return _status(engine)


@router.get("/templates", response_model=List[TemplateInfo])
async def list_templates():
    """List starter brain templates."""
    return get_template_list()


@router.get("/templates/{template_id}", response_model=TemplateCode)
async def get_template(template_id: str):
    """
    Get a template's source.

    Raises:
        404: Template not found
    """
    try:
        code = get_template_code(template_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return TemplateCode(id=template_id, code=code)
