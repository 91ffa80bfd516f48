"""
Revision service layer.

Mirrors the in-memory revision ledger into the SQLAlchemy archive and
reads it back for the HTTP API.
"""

import logging
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mowbot.config import get_settings
from mowbot.core.revisions import Revision
from mowbot.models.revision import RevisionRecord

logger = logging.getLogger(__name__)


def save_revision(db: Session, revision: Revision) -> RevisionRecord:
    """
    Insert or update the archive row for a revision.

    Rows beyond MAX_REVISIONS (oldest first) are pruned.

    Args:
        db: Database session
        revision: Ledger revision

    Returns:
        The archived record
    """
    record = db.query(RevisionRecord).filter(RevisionRecord.id == revision.id).first()
    if record is None:
        record = RevisionRecord(
            id=revision.id,
            timestamp=revision.timestamp,
            source=revision.source,
            note=revision.note,
        )
        db.add(record)
    record.tag = revision.tag.value

    db.commit()
    db.refresh(record)

    prune_revisions(db, get_settings().brain.MAX_REVISIONS)
    return record


def prune_revisions(db: Session, keep: int) -> int:
    """
    Delete all but the newest `keep` archived revisions.

    Returns:
        Number of rows deleted
    """
    stale = (
        db.query(RevisionRecord)
        .order_by(RevisionRecord.timestamp.desc(), RevisionRecord.created_at.desc())
        .offset(keep)
        .all()
    )
    for record in stale:
        db.delete(record)
    if stale:
        db.commit()
    return len(stale)


def get_revisions(db: Session, tag: Optional[str] = None) -> List[RevisionRecord]:
    """
    Get archived revisions, newest first.

    Args:
        db: Database session
        tag: Only return revisions with this tag

    Returns:
        List of records
    """
    query = db.query(RevisionRecord)
    if tag:
        query = query.filter(RevisionRecord.tag == tag)
    return query.order_by(RevisionRecord.timestamp.desc()).all()


def get_revision_by_id(db: Session, revision_id: str) -> Optional[RevisionRecord]:
    """
    Get an archived revision by id.

    Returns:
        Record if found, None otherwise
    """
    return db.query(RevisionRecord).filter(RevisionRecord.id == revision_id).first()


def create_archive_listener(session_factory: Callable[[], Session]) -> Callable[[Revision], None]:
    """
    Build a ledger listener that writes every change to the archive.

    Archive failures are logged and never reach the simulation loop.

    Args:
        session_factory: Callable returning a new Session (e.g. SessionLocal)
    """
    def _archive(revision: Revision) -> None:
        db = session_factory()
        try:
            save_revision(db, revision)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to archive revision {revision.id}: {e}")
        finally:
            db.close()

    return _archive
