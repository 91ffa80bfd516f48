"""
Revision ledger for deployed brain scripts.

Every successful deploy appends a revision tagged UNKNOWN. The supervisor
promotes it to SAFE after a sustained fault-free run, or to ERROR on the
first fault. Only the newest MAX_REVISIONS entries are kept.
"""

import logging
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Deque, List, Optional

from mowbot.config import get_settings

logger = logging.getLogger(__name__)


class RevisionTag(Enum):
    """Outcome recorded for a revision."""
    UNKNOWN = "UNKNOWN"
    SAFE = "SAFE"
    ERROR = "ERROR"


@dataclass
class Revision:
    """Snapshot of one deployed script."""
    id: str
    timestamp: float
    source: str
    tag: RevisionTag = RevisionTag.UNKNOWN
    note: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "source": self.source,
            "tag": self.tag.value,
            "note": self.note,
        }


RevisionListener = Callable[[Revision], None]


def _new_revision_id() -> str:
    return uuid.uuid4().hex[:9]


@dataclass
class RevisionLedger:
    """
    Bounded history of deployed scripts, newest first.

    Listeners are called with the revision after every append and every
    tag change.
    """
    capacity: int = field(default_factory=lambda: get_settings().brain.MAX_REVISIONS)
    _entries: Deque[Revision] = field(default_factory=deque, init=False, repr=False)
    _listeners: List[RevisionListener] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        if self.capacity < 1:
            raise ValueError("Revision ledger capacity must be at least 1")

    def __len__(self) -> int:
        return len(self._entries)

    def add_listener(self, listener: RevisionListener) -> None:
        self._listeners.append(listener)

    def append(self, source: str, note: Optional[str] = None) -> Revision:
        """Record a new deploy and evict the oldest entry if the ledger is full."""
        revision = Revision(id=_new_revision_id(), timestamp=time.time(), source=source, note=note)
        self._entries.appendleft(revision)
        while len(self._entries) > self.capacity:
            evicted = self._entries.pop()
            logger.debug(f"Evicted revision {evicted.id}")
        self._notify(revision)
        return revision

    def tag(self, revision_id: str, tag: RevisionTag) -> Optional[Revision]:
        """
        Set the outcome tag of a revision.

        Returns:
            The updated revision, or None if it has been evicted
        """
        revision = self.get(revision_id)
        if revision is None:
            return None
        if revision.tag != tag:
            revision.tag = tag
            logger.info(f"Revision {revision_id} tagged {tag.value}")
            self._notify(revision)
        return revision

    def latest(self) -> Optional[Revision]:
        return self._entries[0] if self._entries else None

    def get(self, revision_id: str) -> Optional[Revision]:
        for revision in self._entries:
            if revision.id == revision_id:
                return revision
        return None

    def list(self) -> List[Revision]:
        return list(self._entries)

    def last_safe(self) -> Optional[Revision]:
        """Most recent revision tagged SAFE."""
        for revision in self._entries:
            if revision.tag == RevisionTag.SAFE:
                return revision
        return None

    def clear(self) -> None:
        self._entries.clear()

    def _notify(self, revision: Revision) -> None:
        for listener in self._listeners:
            listener(revision)
