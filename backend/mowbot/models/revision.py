"""
Revision record model.

Archive copy of the in-memory revision ledger, one row per deployed script.
"""

from sqlalchemy import Column, DateTime, Float, String, Text
from datetime import datetime

from mowbot.database import Base


class RevisionRecord(Base):
    """
    Archived brain revision.

    Attributes:
        id: Ledger revision id (short random token)
        timestamp: Deploy time (seconds since the epoch)
        source: Script source text
        tag: Outcome tag (UNKNOWN, SAFE or ERROR)
        note: Optional note (e.g. "revert of <id>")
        created_at: Row creation timestamp
        updated_at: Last tag change
    """
    __tablename__ = "revisions"

    id = Column(String(32), primary_key=True, index=True)
    timestamp = Column(Float, nullable=False, index=True)
    source = Column(Text, nullable=False)
    tag = Column(String(16), nullable=False, default="UNKNOWN")
    note = Column(String(200), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<RevisionRecord(id='{self.id}', tag='{self.tag}')>"
