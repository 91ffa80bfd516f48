"""
Telemetry and diagnostics collection for MowBot.

The hub is the sink behind a brain's telemetry, console and debug calls,
and receives the supervisor's diagnostic events. All buffers are bounded.
"""

import logging
import math
import time
from collections import deque
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Deque, Dict, List, Optional

from mowbot.config import get_settings
from mowbot.core.coverage import Point

logger = logging.getLogger(__name__)


class DiagnosticKind(Enum):
    """Why a diagnostic event was emitted."""
    PERIODIC = "PERIODIC"  # Fixed cadence snapshot while running
    ALERT = "ALERT"  # Brain fault
    STOP = "STOP"  # User stopped autonomy


@dataclass
class TaskMetrics:
    """Cumulative metrics for the current deployment."""
    running_time: float = 0.0  # Seconds spent executing the brain
    distance_travelled: float = 0.0
    ticks_executed: int = 0
    fault_count: int = 0
    last_step_ms: float = 0.0
    max_step_ms: float = 0.0
    total_step_ms: float = 0.0

    @property
    def mean_step_ms(self) -> float:
        if self.ticks_executed == 0:
            return 0.0
        return self.total_step_ms / self.ticks_executed

    def record_step(self, elapsed_ms: float) -> None:
        """Account for one completed step() call."""
        self.ticks_executed += 1
        self.last_step_ms = elapsed_ms
        self.total_step_ms += elapsed_ms
        self.max_step_ms = max(self.max_step_ms, elapsed_ms)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["mean_step_ms"] = self.mean_step_ms
        return data


@dataclass(frozen=True)
class DiagnosticEvent:
    """Structured record handed to the diagnostic collaborator."""
    timestamp: float
    kind: DiagnosticKind
    metrics: Dict[str, Any]
    watches: Dict[str, Any]
    message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "kind": self.kind.value,
            "metrics": dict(self.metrics),
            "watches": dict(self.watches),
            "message": self.message,
        }


@dataclass(frozen=True)
class DebugText:
    """A text label drawn in the world."""
    x: float
    y: float
    z: float
    message: str


@dataclass
class DebugOverlay:
    """Latest debug drawing requested by the brain."""
    text: Optional[DebugText] = None
    path: List[Point] = field(default_factory=list)


class TelemetryHub:
    """
    Bounded in-memory store for brain telemetry and diagnostics.

    Numeric samples are grouped into one frame per simulation time stamp,
    so every key logged during a tick lands in the same frame.
    """

    def __init__(
        self,
        history: Optional[int] = None,
        console_history: Optional[int] = None,
        diagnostic_history: Optional[int] = None,
        watch_limit: Optional[int] = None,
    ):
        settings = get_settings()
        self.samples: Deque[Dict[str, float]] = deque(maxlen=history or settings.brain.TELEMETRY_HISTORY)
        self.console: Deque[str] = deque(maxlen=console_history or settings.brain.CONSOLE_HISTORY)
        self.diagnostics: Deque[DiagnosticEvent] = deque(
            maxlen=diagnostic_history or settings.brain.DIAGNOSTIC_HISTORY
        )
        self.watches: Dict[str, Any] = {}
        self.watch_limit = watch_limit or settings.brain.WATCH_LIMIT
        self.overlay = DebugOverlay()

    def record_sample(self, sim_time: float, key: str, value: float) -> None:
        """Append a numeric sample to the frame for sim_time."""
        if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
            logger.debug(f"Dropping non-numeric telemetry sample {key!r}={value!r}")
            return

        if not self.samples or self.samples[-1].get("time") != sim_time:
            self.samples.append({"time": sim_time})
        self.samples[-1][str(key)] = float(value)

    def set_watch(self, key: str, value: Any) -> None:
        """
        Add or update a named watch value.

        Non-scalar values are stored as text. Once watch_limit distinct keys
        exist, new keys are dropped; existing keys still update.
        """
        if value is not None and not isinstance(value, (bool, int, float, str)):
            value = str(value)
        elif isinstance(value, float) and not math.isfinite(value):
            value = str(value)

        key = str(key)
        if key not in self.watches and len(self.watches) >= self.watch_limit:
            logger.debug(f"Dropping watch {key!r}: limit of {self.watch_limit} keys reached")
            return
        self.watches[key] = value

    def write_console(self, message: str) -> None:
        self.console.append(str(message))

    def draw_text(self, x: float, y: float, z: float, message: str) -> None:
        self.overlay.text = DebugText(x=x, y=y, z=z, message=str(message))

    def draw_path(self, points: List[Point]) -> None:
        self.overlay.path = list(points)

    def emit(
        self,
        kind: DiagnosticKind,
        metrics: TaskMetrics,
        message: Optional[str] = None,
    ) -> DiagnosticEvent:
        """
        Record a diagnostic event.

        Args:
            kind: Event kind
            metrics: Metrics snapshot to attach
            message: Optional human-readable message (fault text)

        Returns:
            The recorded event
        """
        event = DiagnosticEvent(
            timestamp=time.time(),
            kind=kind,
            metrics=metrics.to_dict(),
            watches=dict(self.watches),
            message=message,
        )
        self.diagnostics.append(event)
        logger.info(f"Diagnostic event {kind.value}" + (f": {message}" if message else ""))
        return event

    def clear_diagnostics(self) -> None:
        self.diagnostics.clear()

    def reset(self) -> None:
        """Forget everything recorded for the previous deployment."""
        self.samples.clear()
        self.console.clear()
        self.watches = {}
        self.overlay = DebugOverlay()

    def snapshot(self) -> dict:
        """Serializable view of the hub for the HTTP API."""
        text = self.overlay.text
        return {
            "samples": list(self.samples),
            "watches": dict(self.watches),
            "console": list(self.console),
            "debug": {
                "text": asdict(text) if text else None,
                "path": [{"x": p.x, "z": p.z} for p in self.overlay.path],
            },
        }
