"""
Revision API endpoints.

Read-only access to the archived revision history.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from mowbot.core.revisions import RevisionTag
from mowbot.database import get_db
from mowbot.services import revision_service

router = APIRouter(prefix="/revisions", tags=["revisions"])


class RevisionListResponse(BaseModel):
    """Response model for revision listing."""
    id: str
    timestamp: float
    tag: str
    note: Optional[str] = None
    updated_at: datetime

    class Config:
        from_attributes = True


class RevisionResponse(RevisionListResponse):
    """Response model for a single revision (includes source)."""
    source: str


@router.get("", response_model=List[RevisionListResponse])
async def list_revisions(
    tag: Optional[str] = Query(default=None, description="Filter by tag (UNKNOWN, SAFE, ERROR)"),
    db: Session = Depends(get_db)
):
    """
    List archived revisions, newest first.

    Raises:
        400: Unknown tag
    """
    if tag is not None:
        try:
            tag = RevisionTag(tag.upper()).value
        except ValueError:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid tag: {tag}. Must be one of: UNKNOWN, SAFE, ERROR"
            )

    return revision_service.get_revisions(db, tag=tag)


@router.get("/{revision_id}", response_model=RevisionResponse)
async def get_revision(revision_id: str, db: Session = Depends(get_db)):
    """
    Get an archived revision (includes source).

    Raises:
        404: Revision not found
    """
    record = revision_service.get_revision_by_id(db, revision_id)
    if not record:
        raise HTTPException(status_code=404, detail="Revision not found")
    return record
